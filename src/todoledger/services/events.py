"""Event sinks - where completed operations are reported."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from todoledger.models import SyncEvent

logger = logging.getLogger(__name__)


class EventSink(ABC):
    """Receives one SyncEvent per completed operation."""

    @abstractmethod
    def emit(self, event: SyncEvent) -> None:
        raise NotImplementedError("EventSink.emit() must be implemented")


class MemoryEventSink(EventSink):
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self._events: list[SyncEvent] = []

    def emit(self, event: SyncEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> list[SyncEvent]:
        return self._events.copy()

    def failures(self) -> list[SyncEvent]:
        return [e for e in self._events if not e.ok]

    def clear(self) -> None:
        self._events.clear()


class CallbackEventSink(EventSink):
    """Forwards events to a plain callable."""

    def __init__(self, callback: Callable[[SyncEvent], None]):
        self._callback = callback

    def emit(self, event: SyncEvent) -> None:
        self._callback(event)


class LoggingEventSink(EventSink):
    """Writes events to the application log."""

    def emit(self, event: SyncEvent) -> None:
        if event.ok:
            logger.info("%s %s succeeded", event.kind.value, event.target_id)
        else:
            logger.warning(
                "%s %s failed: %s (%s)",
                event.kind.value,
                event.target_id,
                event.error_kind,
                event.message,
            )
