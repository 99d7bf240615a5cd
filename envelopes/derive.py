from typing import Dict, Iterator, Tuple

from envelopes.domain import (
    AccountFigures,
    GoalFigures,
    Snapshot,
    State,
    SubGoal,
    SubGoalFigures,
    Totals,
)
from envelopes.transforms import normalize_amount


def progress_percent(assigned: int, target: int) -> int:
    """Whole percent funded, rounded half up and capped at 100; 0 when target is 0."""
    if target <= 0:
        return 0
    if assigned <= 0:
        return 0
    return min(100, (200 * assigned + target) // (2 * target))


def flatten_sub_goals(state: State) -> Iterator[Tuple[int, int, str, str, SubGoal]]:
    """Yield (goal_index, sub_index, goal_id, goal_name, sub_goal) in display order."""
    for goal_index, goal in enumerate(state.goals):
        for sub_index, sub_goal in enumerate(goal.sub_goals):
            yield goal_index, sub_index, goal.id, goal.name, sub_goal


def derive(state: State) -> Snapshot:
    """Compute every read-only figure from the current allocations.

    Expects a sanitized state. Nothing is cached: each call starts from zero.
    """
    flat = list(flatten_sub_goals(state))
    account_assigned: Dict[str, int] = {a.id: 0 for a in state.accounts}
    sub_goal_assigned: Dict[str, int] = {s.id: 0 for _, _, _, _, s in flat}

    for allocation in state.allocations:
        amount = normalize_amount(allocation.amount)
        if (
            not amount
            or allocation.account_id not in account_assigned
            or allocation.sub_goal_id not in sub_goal_assigned
        ):
            continue
        account_assigned[allocation.account_id] += amount
        sub_goal_assigned[allocation.sub_goal_id] += amount

    accounts = tuple(
        AccountFigures(
            id=a.id,
            name=a.name,
            owner=a.owner,
            balance=a.balance,
            assigned=account_assigned[a.id],
            available=a.balance - account_assigned[a.id],
        )
        for a in state.accounts
    )

    sub_goals = []
    for goal_index, sub_index, goal_id, goal_name, s in flat:
        target = normalize_amount(s.target)
        assigned = sub_goal_assigned[s.id]
        sub_goals.append(SubGoalFigures(
            id=s.id,
            name=s.name,
            goal_id=goal_id,
            goal_name=goal_name,
            goal_index=goal_index,
            sub_index=sub_index,
            target=target,
            assigned=assigned,
            remaining=max(0, target - assigned),
            progress=progress_percent(assigned, target),
        ))
    sub_goals = tuple(sub_goals)

    goals = []
    for goal_index, goal in enumerate(state.goals):
        members = [f for f in sub_goals if f.goal_index == goal_index]
        target = sum(f.target for f in members)
        assigned = sum(f.assigned for f in members)
        goals.append(GoalFigures(
            id=goal.id,
            name=goal.name,
            sub_goal_ids=tuple(f.id for f in members),
            target=target,
            assigned=assigned,
            remaining=max(0, target - assigned),
            progress=progress_percent(assigned, target),
        ))
    goals = tuple(goals)

    total_funds = sum(a.balance for a in accounts)
    total_assigned = sum(a.assigned for a in accounts)
    total_target = sum(g.target for g in goals)
    totals = Totals(
        total_funds=total_funds,
        total_assigned=total_assigned,
        ready_to_assign=total_funds - total_assigned,
        total_target=total_target,
        under_funded=sum(s.remaining for s in sub_goals),
        overall_progress=progress_percent(total_assigned, total_target),
    )

    return Snapshot(
        accounts=accounts,
        goals=goals,
        sub_goals=sub_goals,
        totals=totals,
        account_by_id={a.id: a for a in accounts},
        sub_goal_by_id={s.id: s for s in sub_goals},
    )
