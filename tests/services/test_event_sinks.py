"""Tests for event sinks."""

import logging
from io import StringIO

from rich.console import Console

from todoledger.models import OperationKind, Outcome, SyncEvent, TaskRecord
from todoledger.services.events import CallbackEventSink, LoggingEventSink, MemoryEventSink
from todoledger.ui.formatters import ConsoleEventSink


def _success(target="1"):
    return SyncEvent(
        kind=OperationKind.CREATE,
        target_id="tmp-1",
        outcome=Outcome.SUCCESS,
        record=TaskRecord(id=target, description="Buy milk"),
    )


def _failure(retryable=False):
    return SyncEvent(
        kind=OperationKind.DELETE,
        target_id="7",
        outcome=Outcome.FAILURE,
        error_kind="NetworkError" if retryable else "RemoteRejection",
        message="boom",
        retryable=retryable,
    )


def test_memory_sink_keeps_order():
    sink = MemoryEventSink()
    ok, failed = _success(), _failure()
    sink.emit(ok)
    sink.emit(failed)

    assert sink.events == [ok, failed]
    assert sink.failures() == [failed]

    sink.events.clear()
    assert len(sink.events) == 2

    sink.clear()
    assert sink.events == []


def test_callback_sink():
    received = []
    CallbackEventSink(received.append).emit(_success())
    assert len(received) == 1


def test_logging_sink(caplog):
    with caplog.at_level(logging.INFO, logger="todoledger.services.events"):
        sink = LoggingEventSink()
        sink.emit(_success())
        sink.emit(_failure())

    assert "create tmp-1 succeeded" in caplog.text
    assert "delete 7 failed: RemoteRejection (boom)" in caplog.text


def test_console_sink_prints_real_id():
    buffer = StringIO()
    ConsoleEventSink(Console(file=buffer, width=120)).emit(_success("42"))
    assert "create 42 confirmed" in buffer.getvalue()


def test_console_sink_retry_hint():
    buffer = StringIO()
    sink = ConsoleEventSink(Console(file=buffer, width=120))
    sink.emit(_failure(retryable=True))
    sink.emit(_failure(retryable=False))

    lines = buffer.getvalue().splitlines()
    assert lines[0].endswith("try again")
    assert "(RemoteRejection): boom" in lines[1]
    assert "try again" not in lines[1]
