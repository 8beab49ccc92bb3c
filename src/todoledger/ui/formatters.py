"""Output formatters and the console event sink."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from todoledger.models import SyncEvent, TaskPriority, TaskRecord, TaskStatus
from todoledger.services.events import EventSink

console = Console()

_STATUS_STYLES = {
    TaskStatus.TODO: "white",
    TaskStatus.IN_PROGRESS: "cyan",
    TaskStatus.COMPLETED: "green",
    TaskStatus.CANCELLED: "dim",
}

_PRIORITY_STYLES = {
    TaskPriority.NONE: "dim",
    TaskPriority.LOW: "blue",
    TaskPriority.MEDIUM: "yellow",
    TaskPriority.HIGH: "bold red",
}


def format_tasks(
    records: list[TaskRecord], output_format: str = "table", out: Console | None = None
) -> None:
    """Render a task list."""
    out = out or console
    if output_format == "json":
        out.print_json(json.dumps([r.model_dump(mode="json") for r in records]))
        return

    if not records:
        out.print("[yellow]No tasks found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Description")
    table.add_column("Status")
    table.add_column("Priority")

    for record in records:
        table.add_row(
            record.id or "[dim]pending[/dim]",
            record.description,
            f"[{_STATUS_STYLES[record.status]}]{record.status.value}[/]",
            f"[{_PRIORITY_STYLES[record.priority]}]{record.priority.value}[/]",
        )
    out.print(table)


def format_event(event: SyncEvent, out: Console | None = None) -> None:
    """Print a completed operation as JSON.

    The final record is printed when there is one; after a delete the event
    itself is printed.
    """
    out = out or console
    if event.record is not None:
        out.print_json(event.record.model_dump_json())
    else:
        out.print_json(event.model_dump_json())


def format_config(data: dict[str, Any], out: Console | None = None) -> None:
    """Render a nested config dict as a two-column table."""
    out = out or console
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key")
    table.add_column("Value")
    for section, values in data.items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", "-" if value is None else str(value))
    out.print(table)


def format_success(message: str) -> None:
    """Format success message."""
    console.print(f"[green]✓[/green] {message}")


def format_error(message: str) -> None:
    """Format error message."""
    console.print(f"[red]✗[/red] {message}", style="red")


def format_info(message: str) -> None:
    """Format info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


class ConsoleEventSink(EventSink):
    """Prints each completed operation, with a retry hint on failure."""

    def __init__(self, out: Console | None = None):
        self.out = out or console

    def emit(self, event: SyncEvent) -> None:
        action = event.kind.value
        if event.ok:
            target = event.record.id if event.record and event.record.id else event.target_id
            self.out.print(f"[green]✓[/green] {action} {target} confirmed")
            return

        hint = " - try again" if event.retryable else ""
        self.out.print(
            f"[red]✗[/red] {action} {event.target_id} failed "
            f"({event.error_kind}): {event.message}{hint}"
        )
