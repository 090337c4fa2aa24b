"""``inputforge verify`` and ``inputforge status``."""

from __future__ import annotations

import typer
from rich.table import Table

from inputforge.cli.context import console, fail, load_settings
from inputforge.config import Settings, read_config
from inputforge.core.manifest_store import ManifestStore
from inputforge.core.status import DependencyState, status
from inputforge.core.verifier import verify
from inputforge.errors import InputforgeError, MissingConfigError
from inputforge.models.config import DEFAULT_CONTAINER

_STATE_STYLE = {
    DependencyState.OK: "green",
    DependencyState.MISSING: "red",
    DependencyState.EXTRANEOUS: "yellow",
    DependencyState.MISMATCH: "red",
}


def _root_container(settings: Settings) -> str:
    """Container recorded on the root lockfile; verify works without a config."""
    try:
        return read_config(settings.home).container
    except MissingConfigError:
        return DEFAULT_CONTAINER


def verify_cmd(
    env: str = typer.Option("global", "--env", "-e", help="Environment INPUT must match."),
    core: bool = typer.Option(
        False, "--core", "-c", help="Do not require devDependencies to be present."
    ),
) -> None:
    """Verify INPUT against the manifest and the whole lockfile tree."""
    settings = load_settings()
    try:
        manifest = ManifestStore(settings.manifest_path).read()
        verify(
            manifest, env, settings.input_dir, core_only=core, container=_root_container(settings)
        )
    except InputforgeError as exc:
        fail(exc)
    console.print("[bold green]Dependencies fully verified[/bold green]")


def status_cmd() -> None:
    """Show the manifest's dependencies next to what INPUT holds."""
    settings = load_settings()
    try:
        manifest = ManifestStore(settings.manifest_path).read()
    except InputforgeError as exc:
        fail(exc)

    rows = status(manifest, settings.input_dir)
    if not rows:
        console.print(f"[dim]{manifest.name} has no dependencies.[/dim]")
        return

    table = Table(title=manifest.name)
    table.add_column("Name", style="cyan")
    table.add_column("Requested", justify="right")
    table.add_column("Installed", justify="right")
    table.add_column("Environment")
    table.add_column("Dev", justify="center")
    table.add_column("State")
    for row in rows:
        style = _STATE_STYLE[row.state]
        table.add_row(
            row.name,
            "" if row.requested is None else str(row.requested),
            row.installed or "",
            row.environment or "",
            "yes" if row.dev else "",
            f"[{style}]{row.state.value}[/{style}]",
        )
    console.print(table)
