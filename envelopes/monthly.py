"""Planned versus actual savings per household member per month.

This collection sits beside accounts and goals. It is sanitized on its own
and never touches allocations.
"""

from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Sequence, Tuple

from envelopes import config
from envelopes.domain import MonthlyEntry, State
from envelopes.sanitize import normalize_month, normalize_owner
from envelopes.transforms import make_id, normalize_amount


@dataclass(frozen=True)
class OwnerTotals:
    planned: int = 0
    actual: int = 0

    @property
    def variance(self) -> int:
        return self.actual - self.planned


@dataclass(frozen=True)
class MonthSummary:
    month: str
    planned: int
    actual: int
    variance: int
    cumulative_actual: int
    by_owner: Dict[str, OwnerTotals] = field(default_factory=dict)


def upsert_monthly_entry(
    state: State,
    month: str,
    owner: str,
    planned: Any = None,
    actual: Any = None,
) -> State:
    """Set planned/actual for (month, owner), creating the entry if needed.

    An unparseable month leaves the state unchanged.
    """
    month = normalize_month(month)
    if month is None:
        return state
    owner = normalize_owner(owner)

    for idx, m in enumerate(state.monthly):
        if m.month == month and m.owner == owner:
            updated = replace(
                m,
                planned=m.planned if planned is None else normalize_amount(planned),
                actual=m.actual if actual is None else normalize_amount(actual),
            )
            return replace(state, monthly=state.monthly[:idx] + (updated,) + state.monthly[idx + 1:])

    entry = MonthlyEntry(
        id=make_id("month"),
        month=month,
        owner=owner,
        planned=normalize_amount(planned),
        actual=normalize_amount(actual),
    )
    return replace(state, monthly=state.monthly + (entry,))


def remove_monthly_entry(state: State, entry_id: str) -> State:
    return replace(state, monthly=tuple(m for m in state.monthly if m.id != entry_id))


def monthly_summary(state: State) -> Tuple[MonthSummary, ...]:
    by_month: Dict[str, Dict[str, OwnerTotals]] = defaultdict(dict)
    for m in state.monthly:
        current = by_month[m.month].get(m.owner, OwnerTotals())
        by_month[m.month][m.owner] = OwnerTotals(
            planned=current.planned + m.planned,
            actual=current.actual + m.actual,
        )

    summaries = []
    running = 0
    for month in sorted(by_month):
        owners = by_month[month]
        planned = sum(t.planned for t in owners.values())
        actual = sum(t.actual for t in owners.values())
        running += actual
        summaries.append(MonthSummary(
            month=month,
            planned=planned,
            actual=actual,
            variance=actual - planned,
            cumulative_actual=running,
            by_owner=dict(owners),
        ))
    return tuple(summaries)


def owner_totals(state: State, members: Optional[Sequence[str]] = None) -> Dict[str, OwnerTotals]:
    members = members or config.HOUSEHOLD_MEMBERS
    totals: Dict[str, OwnerTotals] = {name: OwnerTotals() for name in members}
    for m in state.monthly:
        current = totals.get(m.owner, OwnerTotals())
        totals[m.owner] = OwnerTotals(
            planned=current.planned + m.planned,
            actual=current.actual + m.actual,
        )
    return totals
