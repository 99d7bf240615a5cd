from typing import Callable, Iterator

from envelopes.domain import AccountFigures, Snapshot, SubGoalFigures


def iter_accounts(
    snapshot: Snapshot, pred: Callable[[AccountFigures], bool]
) -> Iterator[AccountFigures]:
    for a in snapshot.accounts:
        if pred(a):
            yield a


def iter_sub_goals(
    snapshot: Snapshot, pred: Callable[[SubGoalFigures], bool]
) -> Iterator[SubGoalFigures]:
    for s in snapshot.sub_goals:
        if pred(s):
            yield s


def funded_accounts(snapshot: Snapshot) -> Iterator[AccountFigures]:
    """Accounts with cash left to assign, in collection order."""
    return iter_accounts(snapshot, lambda a: a.available > 0)


def open_sub_goals(snapshot: Snapshot) -> Iterator[SubGoalFigures]:
    """Sub-goals still short of target, goal order then sub-goal order."""
    return iter_sub_goals(snapshot, lambda s: s.remaining > 0)
