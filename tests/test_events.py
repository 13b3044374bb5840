import logging
from datetime import datetime

from daybook.events import (
    Event, EventBus,
    RECORD_ADDED, RECORD_DELETED, PERSIST_FAILED,
    change_log_handler, persist_failed_handler, register_default_handlers
)


def test_event_creation():
    event = Event(
        name=RECORD_ADDED,
        ts=datetime.now().isoformat(),
        payload={"id": "r1", "cat_id": "joy"}
    )
    assert event.name == RECORD_ADDED
    assert event.payload["id"] == "r1"


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(payload)
        return {"processed": True}

    bus.subscribe(RECORD_ADDED, handler)
    results = bus.publish(RECORD_ADDED, {"id": "r1"})

    assert results == [{"processed": True}]
    assert seen == [{"id": "r1"}]


def test_publish_without_subscribers():
    assert EventBus().publish(RECORD_DELETED, {"id": "r1"}) == []


def test_multiple_subscribers_same_event():
    bus = EventBus()
    bus.subscribe(RECORD_ADDED, lambda e, p: {"handler": 1})
    bus.subscribe(RECORD_ADDED, lambda e, p: {"handler": 2})

    results = bus.publish(RECORD_ADDED, {"id": "r1"})
    assert [r["handler"] for r in results] == [1, 2]


def test_unsubscribe():
    bus = EventBus()

    def handler(event, payload):
        return {"x": 1}

    bus.subscribe(RECORD_ADDED, handler)
    bus.unsubscribe(RECORD_ADDED, handler)
    bus.unsubscribe(RECORD_DELETED, handler)
    assert bus.publish(RECORD_ADDED, {}) == []


def test_change_log_handler_is_pure():
    event = Event(name=RECORD_DELETED, ts=datetime.now().isoformat(), payload={"id": "r9"})
    payload = {"id": "r9"}
    assert change_log_handler(event, payload) == {"changed": "r9", "operation": RECORD_DELETED}
    assert payload == {"id": "r9"}


def test_persist_failed_handler_builds_alert(caplog):
    event = Event(name=PERSIST_FAILED, ts=datetime.now().isoformat(), payload={})
    with caplog.at_level(logging.DEBUG, logger="daybook.events"):
        result = persist_failed_handler(event, {"key": "mood", "operation": "add", "reason": "disk full"})
    assert "mood" in result["alert"]
    assert result["reason"] == "disk full"
    assert caplog.records == []


def test_register_default_handlers():
    bus = register_default_handlers(EventBus())
    assert bus.publish(RECORD_ADDED, {"id": "r1"}) == [{"changed": "r1", "operation": RECORD_ADDED}]
    assert len(bus.publish(PERSIST_FAILED, {"key": "mood"})) == 1
