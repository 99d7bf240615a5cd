from envelopes.derive import derive
from envelopes.domain import (
    ALREADY_FUNDED,
    APPLIED_FULL,
    APPLIED_PARTIAL,
    INVALID_SELECTION,
    MOVED,
    NO_AVAILABLE_CASH,
    NOTHING,
    Account,
    Goal,
    Outcome,
    State,
    SubGoal,
)
from envelopes.formatting import format_gbp, outcome_message
from envelopes.functional import (
    Left,
    Nothing,
    Right,
    Some,
    pipe,
    resolve_selection,
    safe_account,
    safe_sub_goal,
)


def make_snapshot():
    return derive(State(
        accounts=(Account("a1", "Main", "Alex", 100), Account("a2", "Empty", "Jordan", 0)),
        goals=(Goal("g1", "House", (SubGoal("s1", "Deposit", 50), SubGoal("s2", "Done", 0))),),
    ))


def test_maybe_and_either_basics():
    assert Some(2).get_or_else(0) == 2
    assert Nothing().is_none()
    assert Nothing().get_or_else(7) == 7
    assert Right(1).bind(lambda x: Left("boom")).get_error() == "boom"
    assert Right(2).map(lambda x: x * 3) == Right(6)
    assert Left("e").map(lambda x: x + 1).bind(lambda x: Right(x)) == Left("e")
    assert Left("e").get_or_else(0) == 0
    assert Right(4).get_or_else(0) == 4


def test_safe_lookups():
    snap = make_snapshot()
    assert safe_account(snap, "a1").get_or_else(None).available == 100
    assert safe_account(snap, "zz").is_none()
    assert safe_sub_goal(snap, "s1").get_or_else(None).goal_name == "House"
    assert safe_sub_goal(snap, "zz").is_none()


def test_resolve_selection():
    snap = make_snapshot()

    ok = resolve_selection(snap, "a1", "s1")
    assert ok.is_right()
    account, sub_goal = ok.get_or_else(None)
    assert (account.id, sub_goal.id) == ("a1", "s1")

    assert resolve_selection(snap, "zz", "s1").get_error() == Outcome(INVALID_SELECTION)
    assert resolve_selection(snap, "a2", "s1").get_error() == Outcome(NO_AVAILABLE_CASH)
    assert resolve_selection(snap, "a1", "s2").get_error().kind == ALREADY_FUNDED


def test_pipe():
    assert pipe(3, lambda x: x + 1, lambda x: x * 2) == 8


def test_format_gbp():
    assert format_gbp(1234) == "£1,234"
    assert format_gbp(-50) == "-£50"
    assert format_gbp(0) == "£0"
    assert format_gbp(2.5) == "£3"
    assert format_gbp(-2.5) == "-£3"
    assert format_gbp(1234.49) == "£1,234"
    assert format_gbp(10**30) == "£" + f"{10**30:,}"


def test_outcome_messages():
    assert outcome_message(Outcome(NOTHING)) == ("Enter a positive amount to assign.", "warn")
    assert outcome_message(Outcome(APPLIED_FULL, 200), "House -> Deposit") == (
        "Assigned £200 to House -> Deposit.", "success",
    )
    text, level = outcome_message(Outcome(APPLIED_PARTIAL, 600))
    assert text.startswith("Assigned £600 (capped")
    assert level == "warn"
    assert outcome_message(Outcome(MOVED, 1500)) == ("Auto-assigned £1,500 across open sub-goals.", "success")
