import math
from dataclasses import replace
from typing import Any, Mapping, Optional, Tuple
from uuid import uuid4

from envelopes.config import DEFAULT_OWNER
from envelopes.domain import Account, Allocation, Goal, MonthlyEntry, State, SubGoal

DEFAULT_SUB_GOAL_TARGET = 1000


def normalize_amount(value: Any) -> int:
    """Nearest non-negative whole amount for any input; junk becomes 0."""
    if isinstance(value, int) and not isinstance(value, bool):
        return max(0, value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(number) or number <= 0:
        return 0
    # half-up, so 2.5 -> 3
    return int(math.floor(number + 0.5))


def make_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:7]}"


def field_of(item: Any, *names: str, default: Any = None) -> Any:
    """Read a field from a dataclass or a dict, trying each name in turn."""
    data = item if isinstance(item, Mapping) else getattr(item, "__dict__", {})
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return default


def state_from_dict(data: Any) -> State:
    """Build a State from the JSON shape without validating values.

    Values are carried over as found; `sanitize` repairs them afterwards.
    """
    if not isinstance(data, Mapping):
        data = {}

    def _items(value: Any) -> tuple:
        if isinstance(value, (list, tuple)):
            return tuple(v for v in value if isinstance(v, Mapping))
        return ()

    accounts = tuple(
        Account(
            id=field_of(a, "id", default=""),
            name=field_of(a, "name", default=""),
            owner=field_of(a, "owner", default=""),
            balance=field_of(a, "balance", default=0),
        )
        for a in _items(data.get("accounts"))
    )
    goals = tuple(
        Goal(
            id=field_of(g, "id", default=""),
            name=field_of(g, "name", default=""),
            sub_goals=tuple(
                SubGoal(
                    id=field_of(s, "id", default=""),
                    name=field_of(s, "name", default=""),
                    target=field_of(s, "target", default=0),
                )
                for s in _items(field_of(g, "subGoals", "sub_goals"))
            ),
        )
        for g in _items(data.get("goals"))
    )
    allocations = tuple(
        Allocation(
            id=field_of(x, "id", default=""),
            account_id=field_of(x, "accountId", "account_id", default=""),
            sub_goal_id=field_of(x, "subGoalId", "sub_goal_id", default=""),
            amount=field_of(x, "amount", default=0),
        )
        for x in _items(data.get("allocations"))
    )
    monthly = tuple(
        MonthlyEntry(
            id=field_of(m, "id", default=""),
            month=field_of(m, "month", default=""),
            owner=field_of(m, "owner", default=""),
            planned=field_of(m, "planned", default=0),
            actual=field_of(m, "actual", default=0),
        )
        for m in _items(data.get("monthly"))
    )
    return State(accounts=accounts, goals=goals, allocations=allocations, monthly=monthly)


def state_to_dict(state: State) -> dict:
    return {
        "accounts": [
            {"id": a.id, "name": a.name, "owner": a.owner, "balance": a.balance}
            for a in state.accounts
        ],
        "goals": [
            {
                "id": g.id,
                "name": g.name,
                "subGoals": [{"id": s.id, "name": s.name, "target": s.target} for s in g.sub_goals],
            }
            for g in state.goals
        ],
        "allocations": [
            {"id": x.id, "accountId": x.account_id, "subGoalId": x.sub_goal_id, "amount": x.amount}
            for x in state.allocations
        ],
        "monthly": [
            {"id": m.id, "month": m.month, "owner": m.owner, "planned": m.planned, "actual": m.actual}
            for m in state.monthly
        ],
    }


def add_account(state: State, name: str = "New Account", owner: str = DEFAULT_OWNER, balance: Any = 0) -> State:
    account = Account(id=make_id("acct"), name=name, owner=owner, balance=normalize_amount(balance))
    return replace(state, accounts=state.accounts + (account,))


def update_account(
    state: State,
    account_id: str,
    name: Optional[str] = None,
    owner: Optional[str] = None,
    balance: Any = None,
) -> State:
    def _update(a: Account) -> Account:
        if a.id != account_id:
            return a
        return Account(
            id=a.id,
            name=a.name if name is None else name,
            owner=a.owner if owner is None else owner,
            balance=a.balance if balance is None else normalize_amount(balance),
        )

    return replace(state, accounts=tuple(_update(a) for a in state.accounts))


def remove_account(state: State, account_id: str) -> State:
    return replace(
        state,
        accounts=tuple(a for a in state.accounts if a.id != account_id),
        allocations=tuple(x for x in state.allocations if x.account_id != account_id),
    )


def add_goal(state: State, name: str = "New Goal") -> State:
    goal = Goal(
        id=make_id("goal"),
        name=name,
        sub_goals=(SubGoal(id=make_id("sg"), name="Sub-goal 1", target=DEFAULT_SUB_GOAL_TARGET),),
    )
    return replace(state, goals=state.goals + (goal,))


def rename_goal(state: State, goal_id: str, name: str) -> State:
    return replace(
        state,
        goals=tuple(replace(g, name=name) if g.id == goal_id else g for g in state.goals),
    )


def remove_goal(state: State, goal_id: str) -> State:
    dropped = {s.id for g in state.goals if g.id == goal_id for s in g.sub_goals}
    return replace(
        state,
        goals=tuple(g for g in state.goals if g.id != goal_id),
        allocations=tuple(x for x in state.allocations if x.sub_goal_id not in dropped),
    )


def add_sub_goal(state: State, goal_id: str, name: Optional[str] = None, target: Any = DEFAULT_SUB_GOAL_TARGET) -> State:
    def _extend(g: Goal) -> Goal:
        if g.id != goal_id:
            return g
        sub_goal = SubGoal(
            id=make_id("sg"),
            name=name or f"Sub-goal {len(g.sub_goals) + 1}",
            target=normalize_amount(target),
        )
        return replace(g, sub_goals=g.sub_goals + (sub_goal,))

    return replace(state, goals=tuple(_extend(g) for g in state.goals))


def update_sub_goal(state: State, sub_goal_id: str, name: Optional[str] = None, target: Any = None) -> State:
    def _update(s: SubGoal) -> SubGoal:
        if s.id != sub_goal_id:
            return s
        return SubGoal(
            id=s.id,
            name=s.name if name is None else name,
            target=s.target if target is None else normalize_amount(target),
        )

    return replace(
        state,
        goals=tuple(replace(g, sub_goals=tuple(_update(s) for s in g.sub_goals)) for g in state.goals),
    )


def remove_sub_goal(state: State, sub_goal_id: str) -> State:
    return replace(
        state,
        goals=tuple(
            replace(g, sub_goals=tuple(s for s in g.sub_goals if s.id != sub_goal_id))
            for g in state.goals
        ),
        allocations=tuple(x for x in state.allocations if x.sub_goal_id != sub_goal_id),
    )


def update_allocation(state: State, allocation_id: str, amount: Any) -> State:
    return replace(
        state,
        allocations=tuple(
            replace(x, amount=normalize_amount(amount)) if x.id == allocation_id else x
            for x in state.allocations
        ),
    )


def remove_allocation(state: State, allocation_id: str) -> State:
    return replace(state, allocations=tuple(x for x in state.allocations if x.id != allocation_id))


def all_sub_goals(state: State) -> Tuple[SubGoal, ...]:
    return tuple(s for g in state.goals for s in g.sub_goals)
