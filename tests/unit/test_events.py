"""Unit tests for the vault event bus."""

from unittest.mock import MagicMock

from passvault.core.events import Event, EventBus, EventType, record_events


def test_emit_reaches_subscribers():
    bus = EventBus()
    handler = MagicMock()
    bus.subscribe(EventType.VAULT_OPENED, handler)

    event = bus.emit_simple(EventType.VAULT_OPENED, path="v.bin")

    handler.assert_called_once_with(event)
    assert event.data == {"path": "v.bin"}


def test_other_types_not_delivered():
    bus = EventBus()
    handler = MagicMock()
    bus.subscribe(EventType.ENTRY_ADDED, handler)
    bus.emit_simple(EventType.VAULT_CLOSED, reason="manual")
    handler.assert_not_called()


def test_unsubscribe():
    bus = EventBus()
    handler = MagicMock()
    bus.subscribe(EventType.VAULT_CLOSED, handler)
    bus.unsubscribe(EventType.VAULT_CLOSED, handler)
    bus.unsubscribe(EventType.VAULT_CLOSED, handler)
    bus.emit_simple(EventType.VAULT_CLOSED, reason="manual")
    handler.assert_not_called()


def test_handler_error_is_contained():
    bus = EventBus()
    after = MagicMock()
    bus.subscribe(EventType.VAULT_CLOSED, MagicMock(side_effect=RuntimeError("ui gone")))
    bus.subscribe(EventType.VAULT_CLOSED, after)

    bus.emit(Event(EventType.VAULT_CLOSED, {"reason": "timeout"}))

    after.assert_called_once()


def test_history_is_bounded_and_filterable():
    bus = EventBus(max_history=3)
    for i in range(5):
        bus.emit_simple(EventType.ENTRY_ADDED, n=i)
    bus.emit_simple(EventType.VAULT_CLOSED, reason="manual")

    assert len(bus.history()) == 3
    assert [e.data["n"] for e in bus.history(EventType.ENTRY_ADDED)] == [3, 4]
    assert bus.history(limit=1)[0].type is EventType.VAULT_CLOSED


def test_record_events():
    bus = EventBus()
    log = record_events(bus)
    bus.emit_simple(EventType.VAULT_OPENED, path="p")
    bus.emit_simple(EventType.VAULT_CLOSED, reason="manual")
    assert [e.type for e in log] == [EventType.VAULT_OPENED, EventType.VAULT_CLOSED]

    only_closed = record_events(EventBus(), EventType.VAULT_CLOSED)
    assert only_closed == []


def test_clear_history_by_type():
    bus = EventBus()
    bus.emit_simple(EventType.VAULT_OPENED, path="p")
    bus.emit_simple(EventType.ENTRY_ADDED, entry="alice")
    bus.emit_simple(EventType.VAULT_CLOSED, reason="manual")

    bus.clear_history(EventType.ENTRY_ADDED)
    assert [e.type for e in bus.history()] == [EventType.VAULT_OPENED, EventType.VAULT_CLOSED]

    bus.clear_history()
    assert bus.history() == []
