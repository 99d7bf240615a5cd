from envelopes.domain import ALREADY_FUNDED, APPLIED_FULL, MOVED, NOTHING, Account, Goal, State, SubGoal
from envelopes.events import FUNDS_ASSIGNED, STATE_CHANGED, EventBus
from envelopes.services import PlannerService
from envelopes.storage import load_state, make_persist_handler
from envelopes.transforms import add_account, remove_account, update_sub_goal


def make_state():
    return State(
        accounts=(Account("a1", "Main", "Alex", 1000),),
        goals=(Goal("g1", "House", (SubGoal("s1", "Deposit", 600),)),),
    )


def recording_bus():
    bus = EventBus()
    seen = []
    bus.subscribe(STATE_CHANGED, lambda event, payload: seen.append((event.name, payload["reason"])) or {})
    bus.subscribe(FUNDS_ASSIGNED, lambda event, payload: seen.append((event.name, payload["outcome"].kind)) or {})
    return bus, seen


def test_event_bus_publish_and_unsubscribe():
    bus = EventBus()

    def handler(event, payload):
        return {"got": payload["n"], "name": event.name}

    assert bus.publish("X", {"n": 1}) == []
    bus.subscribe("X", handler)
    assert bus.publish("X", {"n": 2}) == [{"got": 2, "name": "X"}]
    bus.unsubscribe("X", handler)
    bus.unsubscribe("X", handler)
    assert bus.publish("X", {"n": 3}) == []


def test_service_sanitizes_raw_input():
    service = PlannerService({"accounts": [{"name": "", "balance": 5}]}, bus=EventBus())
    assert service.state.accounts[0].name == "Account 1"


def test_edit_publishes_settled_state():
    bus, seen = recording_bus()
    service = PlannerService(make_state(), bus=bus)

    state = service.edit(add_account, name="Cash", balance=50)

    assert len(state.accounts) == 2
    assert service.snapshot().totals.total_funds == 1050
    assert seen == [(STATE_CHANGED, "add_account")]


def test_edit_without_change_is_silent():
    bus, seen = recording_bus()
    service = PlannerService(make_state(), bus=bus)

    service.edit(remove_account, "missing")
    assert seen == []


def test_assign_and_auto_assign_through_service():
    bus, seen = recording_bus()
    service = PlannerService(make_state(), bus=bus)

    assert service.assign("a1", "s1", 100).kind == APPLIED_FULL
    assert service.auto_assign().kind == MOVED
    assert service.snapshot().sub_goals[0].remaining == 0
    assert service.assign("a1", "s1", 5).kind == ALREADY_FUNDED
    assert service.assign("a1", "s1", 0).kind == NOTHING

    assert seen == [
        (STATE_CHANGED, "assign_funds"),
        (FUNDS_ASSIGNED, APPLIED_FULL),
        (STATE_CHANGED, "auto_assign"),
        (FUNDS_ASSIGNED, MOVED),
        (FUNDS_ASSIGNED, ALREADY_FUNDED),
        (FUNDS_ASSIGNED, NOTHING),
    ]


def test_lowering_target_surfaces_over_assignment():
    service = PlannerService(make_state(), bus=EventBus())
    service.assign("a1", "s1", 600)

    service.edit(update_sub_goal, "s1", target=100)

    sub_goal = service.snapshot().sub_goals[0]
    assert sub_goal.assigned == 600
    assert sub_goal.remaining == 0
    assert sub_goal.progress == 100


def test_replace_and_persist(tmp_path):
    target = tmp_path / "state.json"
    bus = EventBus()
    bus.subscribe(STATE_CHANGED, make_persist_handler(target))
    service = PlannerService(State(), bus=bus)

    service.replace(make_state())

    assert load_state(target) == make_state()


def test_failed_persistence_keeps_memory_state(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    bus = EventBus()
    bus.subscribe(STATE_CHANGED, make_persist_handler(blocker / "state.json"))
    service = PlannerService(make_state(), bus=bus)

    outcome = service.assign("a1", "s1", 200)

    assert outcome.kind == APPLIED_FULL
    assert service.snapshot().accounts[0].available == 800
