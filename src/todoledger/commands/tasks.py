"""Task management commands."""

import asyncio
from collections.abc import Callable

import typer

from todoledger.bootstrap import build_account, build_controller
from todoledger.config import get_config_manager
from todoledger.models import AccountContext, SyncEvent, TaskPriority, TaskStatus
from todoledger.services.events import EventSink, LoggingEventSink
from todoledger.services.sync_controller import SyncController
from todoledger.ui.formatters import (
    ConsoleEventSink,
    format_error,
    format_event,
    format_tasks,
)
from todoledger.utils.exit_codes import exit_code_for

from .decorators import command_wrapper

app = typer.Typer(help="Task management commands")

Operation = Callable[[SyncController, AccountContext], asyncio.Future]


def _output_format(profile: str, output: str | None) -> str:
    if output is None:
        output = get_config_manager(profile).get("output.format") or "table"
    return output


async def _run_operation(profile: str, output: str, operation: Operation) -> SyncEvent:
    """Refresh the mirror, run one operation and wait for it to resolve."""
    config = get_config_manager(profile).config
    account = build_account(config)
    events: EventSink = LoggingEventSink() if output == "json" else ConsoleEventSink()
    controller, client = build_controller(config, events)
    try:
        await controller.refresh(account)
        event = await operation(controller, account)
    finally:
        await controller.join()
        await client.close()

    if not event.ok:
        if output == "json":
            format_error(f"{event.error_kind}: {event.message}")
        raise typer.Exit(code=exit_code_for(event.error_kind))
    if output == "json":
        format_event(event)
    return event


@app.command("list")
@command_wrapper
async def list_tasks(
    status: TaskStatus | None = typer.Option(None, "--status", help="Filter by status"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format (table/json)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """List tasks."""
    output = _output_format(profile, output)
    config = get_config_manager(profile).config
    account = build_account(config)
    controller, client = build_controller(config)
    try:
        records = await controller.refresh(account)
    finally:
        await client.close()

    if status is not None:
        records = [r for r in records if r.status is status]
    format_tasks(records, output)


@app.command("add")
@command_wrapper
async def add_task(
    description: str = typer.Argument(..., help="Task description"),
    priority: TaskPriority = typer.Option(TaskPriority.NONE, "--priority", "-p", help="Priority"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format (table/json)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Add a task."""
    output = _output_format(profile, output)
    await _run_operation(
        profile, output, lambda c, a: c.add(a, description, priority=priority)
    )


@app.command("update")
@command_wrapper
async def update_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
    status: TaskStatus | None = typer.Option(None, "--status", "-s", help="New status"),
    priority: TaskPriority | None = typer.Option(None, "--priority", "-p", help="New priority"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format (table/json)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Update some fields of a task."""
    output = _output_format(profile, output)
    await _run_operation(
        profile,
        output,
        lambda c, a: c.update(
            a, task_id, description=description, status=status, priority=priority
        ),
    )


@app.command("complete")
@command_wrapper
async def complete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format (table/json)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Mark a task as completed."""
    output = _output_format(profile, output)
    await _run_operation(profile, output, lambda c, a: c.complete(a, task_id))


@app.command("reopen")
@command_wrapper
async def reopen_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format (table/json)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Set a task back to ToDo."""
    output = _output_format(profile, output)
    await _run_operation(profile, output, lambda c, a: c.reopen(a, task_id))


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format (table/json)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Delete a task."""
    if not force:
        typer.confirm(f"Delete task {task_id}?", abort=True)
    output = _output_format(profile, output)
    await _run_operation(profile, output, lambda c, a: c.delete(a, task_id))
