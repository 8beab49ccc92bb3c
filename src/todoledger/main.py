"""Main entry point for the todoledger CLI."""

import typer
from rich.console import Console

from todoledger import __version__
from todoledger.commands import config, tasks

app = typer.Typer(
    name="todoledger",
    help="Keep a task list on a CosmWasm contract",
    no_args_is_help=True,
)

console = Console()

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]todoledger[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
