from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = ['event_bus', 'STATE_CHANGED', 'FUNDS_ASSIGNED', 'Event', 'EventBus']


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        """Call every handler for ``name`` in subscription order and collect results."""
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )
        return [handler(event, payload) for handler in list(self._subscribers[name])]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


STATE_CHANGED = "STATE_CHANGED"
FUNDS_ASSIGNED = "FUNDS_ASSIGNED"

event_bus = EventBus()
