"""Configuration management commands."""

import json

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from todoledger.config import get_config_manager
from todoledger.ui.formatters import format_config, format_error, format_info, format_success
from todoledger.utils.exit_codes import ERROR_INVALID_ARGS

app = typer.Typer(help="Configuration management commands")
console = Console()


def _parse_value(value: str) -> object:
    """Convert a CLI string to bool/int/None where it looks like one."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("none", "null"):
        return None
    try:
        return int(value)
    except ValueError:
        return value


@app.command("view")
def view_config(
    profile: str = typer.Option("default", "--profile", help="Profile name"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    config_dict = get_config_manager(profile).config.model_dump()
    if output == "json":
        console.print_json(json.dumps(config_dict))
    else:
        format_config(config_dict, console)


@app.command("get")
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., chain.lcd_endpoint)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Get a configuration value."""
    value = get_config_manager(profile).get(key)
    if value is None:
        format_error(f"Configuration key '{key}' not found or unset")
        raise typer.Exit(ERROR_INVALID_ARGS)
    console.print(value)


@app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., account.owner)"),
    value: str = typer.Argument(..., help="Configuration value"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Set a configuration value."""
    try:
        get_config_manager(profile).set(key, _parse_value(value))
    except KeyError:
        format_error(f"Unknown configuration key '{key}'")
        raise typer.Exit(ERROR_INVALID_ARGS) from None
    except PydanticValidationError as e:
        format_error(f"Invalid value for '{key}': {e.errors()[0]['msg']}")
        raise typer.Exit(ERROR_INVALID_ARGS) from None
    format_success(f"Set {key} = {value}")


@app.command("reset")
def reset_config(
    key: str | None = typer.Argument(None, help="Key to reset (all when omitted)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Reset configuration to defaults."""
    try:
        get_config_manager(profile).reset(key)
    except KeyError:
        format_error(f"Unknown configuration key '{key}'")
        raise typer.Exit(ERROR_INVALID_ARGS) from None
    format_success(f"Reset {key or 'configuration'} to defaults")


@app.command("profiles")
def list_profiles() -> None:
    """List saved configuration profiles."""
    profiles = get_config_manager().list_profiles()
    if not profiles:
        format_info("No saved profiles")
        return
    for name in profiles:
        console.print(name)
