from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    owner: str       # one of config.HOUSEHOLD_MEMBERS
    balance: int     # whole pounds, cash physically in the account


@dataclass(frozen=True)
class SubGoal:
    id: str
    name: str
    target: int


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    sub_goals: Tuple[SubGoal, ...] = ()


@dataclass(frozen=True)
class Allocation:
    id: str
    account_id: str
    sub_goal_id: str
    amount: int


# Savings tracked per owner per month, outside the allocation model
@dataclass(frozen=True)
class MonthlyEntry:
    id: str
    month: str   # "YYYY-MM"
    owner: str
    planned: int = 0
    actual: int = 0


@dataclass(frozen=True)
class State:
    accounts: Tuple[Account, ...] = ()
    goals: Tuple[Goal, ...] = ()
    allocations: Tuple[Allocation, ...] = ()
    monthly: Tuple[MonthlyEntry, ...] = ()


@dataclass(frozen=True)
class AccountFigures:
    id: str
    name: str
    owner: str
    balance: int
    assigned: int
    available: int   # may be negative


@dataclass(frozen=True)
class SubGoalFigures:
    id: str
    name: str
    goal_id: str
    goal_name: str
    goal_index: int
    sub_index: int
    target: int
    assigned: int
    remaining: int
    progress: int


@dataclass(frozen=True)
class GoalFigures:
    id: str
    name: str
    sub_goal_ids: Tuple[str, ...]
    target: int
    assigned: int
    remaining: int
    progress: int


@dataclass(frozen=True)
class Totals:
    total_funds: int
    total_assigned: int
    ready_to_assign: int
    total_target: int
    under_funded: int
    overall_progress: int


@dataclass(frozen=True)
class Snapshot:
    accounts: Tuple[AccountFigures, ...]
    goals: Tuple[GoalFigures, ...]
    sub_goals: Tuple[SubGoalFigures, ...]
    totals: Totals
    account_by_id: Dict[str, AccountFigures] = field(default_factory=dict, compare=False, repr=False)
    sub_goal_by_id: Dict[str, SubGoalFigures] = field(default_factory=dict, compare=False, repr=False)


NOTHING = "nothing"
INVALID_SELECTION = "invalid-selection"
NO_AVAILABLE_CASH = "no-available-cash"
ALREADY_FUNDED = "already-funded"
APPLIED_FULL = "applied-full"
APPLIED_PARTIAL = "applied-partial"

ALL_FUNDED = "all-funded"
NO_FUNDS = "no-funds"
NO_VALID_MOVES = "no-valid-moves"
MOVED = "moved"


@dataclass(frozen=True)
class Outcome:
    kind: str
    amount: int = 0
    sub_goal_id: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.kind in (APPLIED_FULL, APPLIED_PARTIAL, MOVED)
