"""Per-invocation wiring shared by the CLI commands.

Settings, the user config and the manifest are loaded explicitly for each
command and threaded into the core; nothing here is process-global state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from inputforge import __version__
from inputforge.config import Settings, mark_upgrade_checked, read_config, upgrade_check_due
from inputforge.core.backend import ArtifactoryBackend
from inputforge.core.cache import ArtifactCache
from inputforge.core.fetcher import Fetcher
from inputforge.core.installer import Installer
from inputforge.core.manifest_store import ManifestStore
from inputforge.models.config import ToolConfig

console = Console()
logger = logging.getLogger(__name__)


def load_settings() -> Settings:
    return Settings()


def build_client(settings: Settings) -> httpx.Client:
    """The HTTP client used for every remote call of one invocation."""
    return httpx.Client(timeout=settings.http_timeout, follow_redirects=True)


def fail(exc: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(code=1)


@contextmanager
def open_installer(settings: Settings, cfg: ToolConfig | None = None) -> Iterator[Installer]:
    """Build an Installer for the working directory, closing the client after."""
    cfg = cfg or read_config(settings.home)
    if upgrade_check_due(cfg):
        logger.info(
            "inputforge %s; run `pip install -U inputforge` to pick up newer releases",
            __version__,
        )
        cfg = mark_upgrade_checked(settings.home, cfg)
    with build_client(settings) as client:
        backend = ArtifactoryBackend.from_config(cfg, client)
        fetcher = Fetcher(backend, ArtifactCache.from_config(cfg))
        yield Installer(fetcher, ManifestStore(settings.manifest_path), settings.input_dir)
