"""
Lifecycle events emitted by the vault.

Listeners (a UI, a CLI, tests) subscribe to an :class:`EventBus`; the vault has
no dependency on who listens. Handler errors are logged and never abort the
vault operation that emitted the event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    VAULT_OPENED = "vault.opened"
    VAULT_CLOSED = "vault.closed"
    ENTRY_ADDED = "entry.added"


@dataclass
class Event:
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


Handler = Callable[[Event], None]


class EventBus:
    def __init__(self, max_history: int = 1000):
        self._handlers: Dict[EventType, List[Handler]] = {}
        self._history: List[Event] = []
        self._max_history = max_history

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug("Handler subscribed to %s", event_type.value)

    def unsubscribe(self, event_type: EventType, handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: Event) -> None:
        self._history.append(event)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

        for handler in list(self._handlers.get(event.type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler error for %s", event.type.value)

    def emit_simple(self, event_type: EventType, **data: Any) -> Event:
        event = Event(type=event_type, data=data)
        self.emit(event)
        return event

    def history(self, event_type: Optional[EventType] = None, limit: int = 100) -> List[Event]:
        events = self._history
        if event_type is not None:
            events = [e for e in events if e.type == event_type]
        return events[-limit:]

    def clear_history(self, event_type: Optional[EventType] = None) -> None:
        """Drop recorded events, all of them or only those of ``event_type``."""
        if event_type is None:
            self._history = []
        else:
            self._history = [e for e in self._history if e.type != event_type]


def record_events(bus: EventBus, *types: EventType) -> List[Event]:
    """Subscribe to ``types`` (default: all) and return the list they land in."""
    log: List[Event] = []
    for event_type in types or tuple(EventType):
        bus.subscribe(event_type, log.append)
    return log
