"""Main Typer application — imports and registers all CLI commands.

Entry point: ``inputforge`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from inputforge import __version__
from inputforge.cli.commands.configure import configure_cmd, init_cmd
from inputforge.cli.commands.fetch import (
    export_cmd,
    fetch_cmd,
    remove_cmd,
    update_all_cmd,
    update_cmd,
)
from inputforge.cli.commands.stash import stash_cmd
from inputforge.cli.commands.verify import status_cmd, verify_cmd
from inputforge.cli.context import console, load_settings

app = typer.Typer(
    name="inputforge",
    help="inputforge: fetch, stash and verify component dependencies.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

_VERBOSITY_LEVELS = {1: logging.INFO, 2: logging.DEBUG}


def setup_logging(verbose: int, default_level: str = "INFO") -> None:
    """Route log records through Rich; -v for INFO, -vv for DEBUG."""
    if verbose:
        level = _VERBOSITY_LEVELS.get(min(verbose, 2), logging.DEBUG)
    else:
        level = logging.getLevelName(default_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.callback(invoke_without_command=True)
def main_callback(
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase verbosity (-v INFO, -vv DEBUG)."
    ),
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit."),
) -> None:
    """inputforge: fetch, stash and verify component dependencies."""
    if version:
        console.print(f"inputforge {__version__}")
        raise typer.Exit(0)
    setup_logging(verbose, load_settings().log_level)


# Register subcommands
app.command(name="configure", help="Create the user config.")(configure_cmd)
app.command(name="init", help="Create a manifest for a new component.")(init_cmd)
app.command(name="fetch", help="Fetch all manifest dependencies into INPUT.")(fetch_cmd)
app.command(name="update", help="Install specific components.")(update_cmd)
app.command(name="update-all", help="Update all dependencies to latest.")(update_all_cmd)
app.command(name="remove", help="Remove components from INPUT.")(remove_cmd)
app.command(name="export", help="Export a component tarball from the cache.")(export_cmd)
app.command(name="stash", help="Stash OUTPUT in the cache under a label.")(stash_cmd)
app.command(name="verify", help="Verify INPUT against the manifest.")(verify_cmd)
app.command(name="status", help="Show dependency status.")(status_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
