#!/usr/bin/env python3
"""
Main CLI entry point for codex
"""

import typer

from codex_archive import __version__
from codex_archive.commands.groups import app as groups_app
from codex_archive.commands.items import app as items_app
from codex_archive.config.settings import get_env_var, validate_all_env_vars
from codex_archive.utils.logging import configure_logging

app = typer.Typer(
    name="codex",
    help="Codex - a personal archive of documents, audio, video, links and notes",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
) -> None:
    """
    Codex - a personal archive of documents, audio, video, links and notes

    [bold]Examples:[/bold]

    Save an audio item:
        [cyan]codex items save "Interview.mp3" --kind audio --owner u1[/cyan]

    Group it and add the next part:
        [cyan]codex groups create "Mayor Interview" <item-id> --owner u1[/cyan]
        [cyan]codex groups add <group-id> <part2-id> --owner u1[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)

    errors = validate_all_env_vars()
    if errors:
        for error in errors:
            typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(1)

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = get_env_var("CODEX_LOG_LEVEL") or "WARNING"
    configure_logging(level)


@app.command()
def version() -> None:
    """Show codex version"""
    typer.echo(f"codex version {__version__}")


app.add_typer(items_app, name="items")
app.add_typer(groups_app, name="groups")


if __name__ == "__main__":
    app()
