"""``inputforge configure`` and ``inputforge init``."""

from __future__ import annotations

import typer
from rich.panel import Panel

from inputforge.cli.context import console, fail, load_settings
from inputforge.config import configure
from inputforge.core.manifest_store import ManifestStore
from inputforge.errors import InputforgeError


def configure_cmd(
    defaults: bool = typer.Option(
        False,
        "--defaults",
        "-y",
        help="Write the default config without prompting.",
    ),
) -> None:
    """Create the user config, prompting for the remote, cache and container."""
    settings = load_settings()
    try:
        cfg = configure(settings.home, prompt=not defaults, save=True)
    except InputforgeError as exc:
        fail(exc)

    console.print(
        Panel(
            "\n".join([
                f"[bold]Config:[/bold]      {settings.config_path}",
                f"[bold]Artifactory:[/bold] {cfg.artifactory}",
                f"[bold]Cache:[/bold]       {cfg.cache}",
                f"[bold]Container:[/bold]   {cfg.container}",
            ]),
            title="[bold]inputforge[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )


def init_cmd(
    name: str = typer.Argument(..., help="Name of the component in this directory."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing manifest."
    ),
) -> None:
    """Create a manifest.json for a new component."""
    settings = load_settings()
    try:
        ManifestStore(settings.manifest_path).init(name, force=force)
    except (InputforgeError, ValueError) as exc:
        fail(exc)
    console.print(f"[bold green]Created[/bold green] {settings.manifest_path} for {name}")
