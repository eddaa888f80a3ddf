"""Error handling decorator for CLI commands.

Maps the Codex exception hierarchy onto rich error messages and typer
exit codes so every command reports failures the same way.
"""

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from ..exceptions import CodexError, GroupingError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_cli_error(
    operation: str,
    console: Optional[Console] = None,
    exit_code: int = 1,
    log_traceback: bool = True,
) -> Callable[[F], F]:
    """Decorator for consistent CLI command error handling.

    Args:
        operation: Description of the operation for error messages
        console: Rich Console instance for output (shared console if not provided)
        exit_code: Exit code to use on error (default: 1)
        log_traceback: Whether to log the full traceback for unexpected errors

    Usage:
        @app.command()
        @handle_cli_error("creating group")
        def create(name: str):
            ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if console is None:
                from .output import console as shared_console

                _console = shared_console
            else:
                _console = console
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except typer.Abort:
                _console.print(f"[yellow]{operation.capitalize()} cancelled[/yellow]")
                raise typer.Exit(0) from None
            except NotFoundError as e:
                _console.print(f"[red]Error: {escape(str(e))}[/red]")
                raise typer.Exit(exit_code) from e
            except ValidationError as e:
                _console.print(f"[red]Validation error: {escape(str(e))}[/red]")
                raise typer.Exit(exit_code) from e
            except GroupingError as e:
                _console.print(f"[red]Error {operation}: {escape(str(e))}[/red]")
                if e.retryable:
                    _console.print("[dim]This operation can be retried safely.[/dim]")
                raise typer.Exit(exit_code) from e
            except StoreError as e:
                _console.print(f"[red]Database error: {escape(str(e))}[/red]")
                if log_traceback:
                    logger.error(f"Store error during {operation}: {e}", exc_info=True)
                raise typer.Exit(exit_code) from e
            except CodexError as e:
                _console.print(f"[red]Error {operation}: {escape(str(e))}[/red]")
                raise typer.Exit(exit_code) from e
            except Exception as e:
                _console.print(f"[red]Error {operation}: {escape(str(e))}[/red]")
                if log_traceback:
                    logger.error(f"Unexpected error during {operation}: {e}", exc_info=True)
                raise typer.Exit(exit_code) from e

        return wrapper  # type: ignore[return-value]

    return decorator
