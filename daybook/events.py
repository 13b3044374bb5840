import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'RECORD_ADDED', 'RECORD_UPDATED', 'RECORD_DELETED',
    'CATEGORY_ADDED', 'CATEGORY_DELETED', 'PERSIST_FAILED',
    'Event', 'EventBus', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        results = []
        for handler in self._subscribers[name]:
            result = handler(event, payload)
            results.append(result)
        return results

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)


RECORD_ADDED = "RECORD_ADDED"
RECORD_UPDATED = "RECORD_UPDATED"
RECORD_DELETED = "RECORD_DELETED"
CATEGORY_ADDED = "CATEGORY_ADDED"
CATEGORY_DELETED = "CATEGORY_DELETED"
PERSIST_FAILED = "PERSIST_FAILED"


def persist_failed_handler(event: Event, payload: dict) -> dict:
    # the store has already logged the failure
    return {
        "alert": f"Changes to {payload.get('key', '?')} are not saved yet",
        "reason": payload.get("reason", "unknown"),
    }


def change_log_handler(event: Event, payload: dict) -> dict:
    logger.debug("%s %s", event.name, payload.get("id"))
    return {"changed": payload.get("id"), "operation": event.name}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(PERSIST_FAILED, persist_failed_handler)
    for name in (RECORD_ADDED, RECORD_UPDATED, RECORD_DELETED):
        bus.subscribe(name, change_log_handler)
    return bus
