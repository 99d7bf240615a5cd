from typing import Callable, Generic, Tuple, TypeVar, Union

from envelopes.domain import (
    ALREADY_FUNDED,
    INVALID_SELECTION,
    NO_AVAILABLE_CASH,
    AccountFigures,
    Outcome,
    Snapshot,
    SubGoalFigures,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Some(Generic[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_none(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing:

    def get_or_else(self, default):
        return default

    def is_none(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


Maybe = Union[Some[T], Nothing]


class Right(Generic[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Right[U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either']) -> 'Either':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_left(self) -> bool:
        return False

    def is_right(self) -> bool:
        return True

    def get_error(self):
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Generic[E]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f) -> 'Left[E]':
        return self

    def bind(self, f) -> 'Left[E]':
        return self

    def get_or_else(self, default):
        return default

    def is_left(self) -> bool:
        return True

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


Either = Union[Left[E], Right[T]]


def safe_account(snapshot: Snapshot, account_id: str) -> Maybe[AccountFigures]:
    account = snapshot.account_by_id.get(account_id)
    return Some(account) if account is not None else Nothing()


def safe_sub_goal(snapshot: Snapshot, sub_goal_id: str) -> Maybe[SubGoalFigures]:
    sub_goal = snapshot.sub_goal_by_id.get(sub_goal_id)
    return Some(sub_goal) if sub_goal is not None else Nothing()


Selection = Tuple[AccountFigures, SubGoalFigures]


def resolve_selection(snapshot: Snapshot, account_id: str, sub_goal_id: str) -> Either[Outcome, Selection]:
    """Look up both ends of a manual assignment and check each can take money."""
    account = safe_account(snapshot, account_id)
    sub_goal = safe_sub_goal(snapshot, sub_goal_id)
    if account.is_none() or sub_goal.is_none():
        return Left(Outcome(INVALID_SELECTION))

    pair = (account.get_or_else(None), sub_goal.get_or_else(None))
    return Right(pair).bind(_has_cash).bind(_needs_money)


def _has_cash(pair: Selection) -> Either[Outcome, Selection]:
    if pair[0].available <= 0:
        return Left(Outcome(NO_AVAILABLE_CASH))
    return Right(pair)


def _needs_money(pair: Selection) -> Either[Outcome, Selection]:
    if pair[1].remaining <= 0:
        return Left(Outcome(ALREADY_FUNDED, sub_goal_id=pair[1].id))
    return Right(pair)


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res
