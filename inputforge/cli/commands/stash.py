"""``inputforge stash LABEL`` — keep OUTPUT in the cache under a name."""

from __future__ import annotations

import typer

from inputforge.cli.context import console, fail, load_settings
from inputforge.config import read_config
from inputforge.core.cache import ArtifactCache
from inputforge.core.manifest_store import ManifestStore
from inputforge.errors import InputforgeError


def stash_cmd(
    label: str = typer.Argument(..., help="Name to stash under (must not be an integer)."),
) -> None:
    """Stash OUTPUT so it can be installed elsewhere with ``update NAME=LABEL``."""
    settings = load_settings()
    try:
        cfg = read_config(settings.home)
        manifest = ManifestStore(settings.manifest_path).read()
        dest = ArtifactCache.from_config(cfg).stash_output(
            manifest.name, label, settings.output_dir
        )
    except InputforgeError as exc:
        fail(exc)
    console.print(f"[bold green]Stashed[/bold green] {manifest.name}={label} in {dest}")
