"""Service layer: the local mirror and the sync controller that drives it."""

from .events import CallbackEventSink, EventSink, LoggingEventSink, MemoryEventSink
from .sync_controller import SyncController
from .task_store import TaskStore

__all__ = [
    "TaskStore",
    "SyncController",
    "EventSink",
    "MemoryEventSink",
    "CallbackEventSink",
    "LoggingEventSink",
]
