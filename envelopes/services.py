from typing import Any, Callable, Mapping, Optional, Union

from envelopes import allocator
from envelopes.derive import derive
from envelopes.domain import Outcome, Snapshot, State
from envelopes.events import FUNDS_ASSIGNED, STATE_CHANGED, EventBus, event_bus
from envelopes.functional import pipe
from envelopes.sanitize import sanitize


class PlannerService:
    """Session facade holding the single current state for a UI.

    Every change goes through here: the edit or allocator call runs on the
    current state, the result is re-sanitized, and STATE_CHANGED is
    published with the settled snapshot so that subscribers (persistence)
    never see a half-applied state.
    """

    def __init__(self, state: Union[State, Mapping, None] = None, bus: Optional[EventBus] = None):
        self._state = sanitize(state)
        self.bus = bus if bus is not None else event_bus

    @property
    def state(self) -> State:
        return self._state

    def snapshot(self) -> Snapshot:
        return derive(self._state)

    def _commit(self, state: State, reason: str) -> None:
        self._state = state
        self.bus.publish(STATE_CHANGED, {"state": state, "reason": reason})

    def edit(self, operation: Callable[..., State], *args: Any, **kwargs: Any) -> State:
        new_state = pipe(operation(self._state, *args, **kwargs), sanitize)
        if new_state != self._state:
            self._commit(new_state, getattr(operation, "__name__", "edit"))
        return self._state

    def replace(self, raw: Union[State, Mapping, None]) -> State:
        self._commit(sanitize(raw), "replace")
        return self._state

    def assign(self, account_id: str, sub_goal_id: str, amount: Any) -> Outcome:
        new_state, outcome = allocator.assign_funds(self._state, account_id, sub_goal_id, amount)
        return self._settle(new_state, outcome, "assign_funds")

    def auto_assign(self) -> Outcome:
        new_state, outcome = allocator.auto_assign(self._state)
        return self._settle(new_state, outcome, "auto_assign")

    def _settle(self, new_state: State, outcome: Outcome, reason: str) -> Outcome:
        if outcome.changed:
            self._commit(new_state, reason)
        self.bus.publish(FUNDS_ASSIGNED, {"outcome": outcome})
        return outcome
