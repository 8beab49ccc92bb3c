"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import typer

from todoledger.models import TodoLedgerError
from todoledger.ui.formatters import format_error
from todoledger.utils.exit_codes import ERROR_GENERAL, exit_code_for
from todoledger.utils.logger import get_logger


def command_wrapper(func: Callable):
    """Run a sync or async command with logging and error-to-exit-code mapping."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if inspect.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except TodoLedgerError as e:
            elapsed = time.monotonic() - start
            logger.error("command failed: %s (%.3fs) - %s: %s", cmd, elapsed, e.kind, e)
            format_error(str(e))
            raise typer.Exit(code=exit_code_for(e.kind)) from e

        except (typer.Exit, typer.Abort):
            # Re-raise Typer's own exits and aborted confirmations
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=ERROR_GENERAL) from e

    return wrapper
