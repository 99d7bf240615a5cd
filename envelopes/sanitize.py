"""Repair a raw or edited state into a structurally valid one.

Order matters: accounts and goals are cleaned first so that the allocation
filter can check references against the ids they end up with.
"""

import logging
import re
from typing import Any, Iterable, Mapping, Optional, Sequence, Set, Tuple, Union

from envelopes import config
from envelopes.domain import Account, Allocation, Goal, MonthlyEntry, State, SubGoal
from envelopes.transforms import field_of, make_id, normalize_amount, state_from_dict

logger = logging.getLogger(__name__)

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})(?:-\d{2})?$")


def _text(value: Any, fallback: str) -> str:
    return str(value or fallback).strip() or fallback


def _items(value: Any) -> Tuple[Any, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return ()


def normalize_owner(value: Any, members: Optional[Sequence[str]] = None) -> str:
    """Map an owner to its canonical household member, else the default owner."""
    members = members or config.HOUSEHOLD_MEMBERS
    wanted = str(value or "").strip().casefold()
    for member in members:
        if member.casefold() == wanted:
            return member
    return config.DEFAULT_OWNER


def normalize_month(value: Any) -> Optional[str]:
    match = _MONTH_RE.match(str(value or "").strip())
    if not match:
        return None
    year, month = match.groups()
    if not 1 <= int(month) <= 12:
        return None
    return f"{year}-{month}"


def _clean_accounts(raw: Iterable[Any], members: Sequence[str]) -> Tuple[Account, ...]:
    accounts = []
    for idx, a in enumerate(raw):
        accounts.append(Account(
            id=_text(field_of(a, "id"), "") or make_id("acct"),
            name=_text(field_of(a, "name"), f"Account {idx + 1}"),
            owner=normalize_owner(field_of(a, "owner"), members),
            balance=normalize_amount(field_of(a, "balance")),
        ))
    return tuple(accounts)


def _clean_goals(raw: Iterable[Any]) -> Tuple[Goal, ...]:
    goals = []
    for idx, g in enumerate(raw):
        sub_goals = tuple(
            SubGoal(
                id=_text(field_of(s, "id"), "") or make_id("sg"),
                name=_text(field_of(s, "name"), f"Sub-goal {sub_idx + 1}"),
                target=normalize_amount(field_of(s, "target")),
            )
            for sub_idx, s in enumerate(_items(field_of(g, "sub_goals", "subGoals")))
        )
        goals.append(Goal(
            id=_text(field_of(g, "id"), "") or make_id("goal"),
            name=_text(field_of(g, "name"), f"Goal {idx + 1}"),
            sub_goals=sub_goals,
        ))
    return tuple(goals)


def _clean_allocations(raw: Iterable[Any], account_ids: Set[str], sub_goal_ids: Set[str]) -> Tuple[Allocation, ...]:
    kept = []
    dropped = 0
    for x in raw:
        allocation = Allocation(
            id=_text(field_of(x, "id"), "") or make_id("alloc"),
            account_id=_text(field_of(x, "account_id", "accountId"), ""),
            sub_goal_id=_text(field_of(x, "sub_goal_id", "subGoalId"), ""),
            amount=normalize_amount(field_of(x, "amount")),
        )
        if (
            allocation.amount > 0
            and allocation.account_id in account_ids
            and allocation.sub_goal_id in sub_goal_ids
        ):
            kept.append(allocation)
        else:
            dropped += 1
    if dropped:
        logger.debug("Dropped %d invalid allocation(s)", dropped)
    return tuple(kept)


def _clean_monthly(raw: Iterable[Any], members: Sequence[str]) -> Tuple[MonthlyEntry, ...]:
    kept = []
    for m in raw:
        month = normalize_month(field_of(m, "month"))
        if month is None:
            logger.debug("Dropped monthly entry with bad month %r", field_of(m, "month"))
            continue
        kept.append(MonthlyEntry(
            id=_text(field_of(m, "id"), "") or make_id("month"),
            month=month,
            owner=normalize_owner(field_of(m, "owner"), members),
            planned=normalize_amount(field_of(m, "planned")),
            actual=normalize_amount(field_of(m, "actual")),
        ))
    return tuple(kept)


def sanitize(state: Union[State, Mapping, None], members: Optional[Sequence[str]] = None) -> State:
    """Return a valid State. Never raises; idempotent on its own output."""
    if not isinstance(state, State):
        state = state_from_dict(state)
    members = members or config.HOUSEHOLD_MEMBERS

    accounts = _clean_accounts(_items(state.accounts), members)
    account_ids = {a.id for a in accounts}

    goals = _clean_goals(_items(state.goals))
    sub_goal_ids = {s.id for g in goals for s in g.sub_goals}

    allocations = _clean_allocations(_items(state.allocations), account_ids, sub_goal_ids)
    monthly = _clean_monthly(_items(state.monthly), members)

    return State(accounts=accounts, goals=goals, allocations=allocations, monthly=monthly)
