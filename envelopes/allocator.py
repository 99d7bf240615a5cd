"""Manual and automatic assignment of account cash to sub-goals.

Both operations take a state and return ``(new_state, outcome)``. Neither
keeps anything between calls: the working figures are derived afresh from
the state passed in.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Tuple

from envelopes.derive import derive
from envelopes.domain import (
    ALL_FUNDED,
    APPLIED_FULL,
    APPLIED_PARTIAL,
    MOVED,
    NO_FUNDS,
    NO_VALID_MOVES,
    NOTHING,
    Allocation,
    Outcome,
    State,
)
from envelopes.functional import resolve_selection
from envelopes.lazy import funded_accounts, open_sub_goals
from envelopes.sanitize import sanitize
from envelopes.transforms import make_id, normalize_amount

logger = logging.getLogger(__name__)


def upsert_allocation(
    allocations: Tuple[Allocation, ...], account_id: str, sub_goal_id: str, amount: Any
) -> Tuple[Allocation, ...]:
    """Add ``amount`` to the (account, sub-goal) pair.

    Linear scan keyed on the pair: the first matching allocation is topped
    up, otherwise a new one is appended. Later duplicates of the same pair
    are left alone.
    """
    amount = normalize_amount(amount)
    if not amount:
        return allocations

    for idx, x in enumerate(allocations):
        if x.account_id == account_id and x.sub_goal_id == sub_goal_id:
            merged = replace(x, amount=normalize_amount(normalize_amount(x.amount) + amount))
            return allocations[:idx] + (merged,) + allocations[idx + 1:]

    return allocations + (Allocation(
        id=make_id("alloc"),
        account_id=account_id,
        sub_goal_id=sub_goal_id,
        amount=amount,
    ),)


def assign_funds(state: State, account_id: str, sub_goal_id: str, amount: Any) -> Tuple[State, Outcome]:
    state = sanitize(state)
    requested = normalize_amount(amount)
    if not requested:
        return state, Outcome(NOTHING)

    selection = resolve_selection(derive(state), account_id, sub_goal_id)
    if selection.is_left():
        return state, selection.get_error()

    account, sub_goal = selection.get_or_else(None)
    applied = min(requested, account.available, sub_goal.remaining)
    allocations = upsert_allocation(state.allocations, account.id, sub_goal.id, applied)
    logger.debug("Assigned %d of %d from %s to %s", applied, requested, account.id, sub_goal.id)

    kind = APPLIED_FULL if applied == requested else APPLIED_PARTIAL
    return sanitize(replace(state, allocations=allocations)), Outcome(kind, applied, sub_goal.id)


def auto_assign(state: State) -> Tuple[State, Outcome]:
    """Greedy single pass: each funded account in order fills open sub-goals in order."""
    state = sanitize(state)
    snapshot = derive(state)
    open_goals = list(open_sub_goals(snapshot))
    accounts = list(funded_accounts(snapshot))

    if not open_goals:
        return state, Outcome(ALL_FUNDED)
    if not accounts:
        return state, Outcome(NO_FUNDS)

    remaining: Dict[str, int] = {s.id: s.remaining for s in open_goals}
    allocations = state.allocations
    moved = 0

    for account in accounts:
        available = account.available
        for sub_goal in open_goals:
            if available <= 0:
                break
            need = remaining[sub_goal.id]
            if need <= 0:
                continue
            amount = min(available, need)
            if amount <= 0:
                continue
            allocations = upsert_allocation(allocations, account.id, sub_goal.id, amount)
            available -= amount
            remaining[sub_goal.id] = need - amount
            moved += amount

    if not moved:
        return state, Outcome(NO_VALID_MOVES)

    logger.debug("Auto-assigned %d across %d open sub-goal(s)", moved, len(open_goals))
    return sanitize(replace(state, allocations=allocations)), Outcome(MOVED, moved)
