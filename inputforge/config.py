"""Process settings and the user configuration file.

Two layers:

* ``Settings`` — env-driven process settings (``INPUTFORGE_*`` variables or a
  ``.env`` file): where the user config lives, log level, HTTP timeout and the
  working-directory layout.
* ``ToolConfig`` — the JSON document at ``<home>/config`` naming the remote and
  the cache root. It is loaded once per invocation and passed explicitly to
  every operation that needs it.

Examples
--------
Point the tool at a scratch home::

    export INPUTFORGE_HOME=/tmp/forge-home
    export INPUTFORGE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import typer
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from inputforge.core.documents import read_document, write_document
from inputforge.errors import MissingConfigError
from inputforge.models.config import ToolConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config"
UPGRADE_CHECK_INTERVAL = timedelta(days=1)


def _default_home() -> Path:
    try:
        return Path.home() / ".inputforge"
    except RuntimeError:
        # No resolvable home directory; read_config reports MissingConfigError.
        return Path()


class Settings(BaseSettings):
    """Process-level settings with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="INPUTFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    home: Path = Field(default_factory=_default_home)
    log_level: str = "INFO"
    http_timeout: float = 5.0

    # Working-directory layout
    manifest_path: Path = Path("manifest.json")
    input_dir: Path = Path("INPUT")
    output_dir: Path = Path("OUTPUT")

    @property
    def config_path(self) -> Path:
        return self.home / CONFIG_FILENAME


def _config_path(home: Path) -> Path:
    if home == Path():
        raise MissingConfigError("<no home directory>")
    return Path(home) / CONFIG_FILENAME


def default_config(home: Path) -> ToolConfig:
    """A config with the cache under ``<home>/cache``.

    The upgrade check is backdated so a fresh config always triggers one.
    """
    return ToolConfig(cache=str(Path(home) / "cache"))


def read_config(home: Path) -> ToolConfig:
    """Load ``<home>/config``; MissingConfigError if it does not exist."""
    path = _config_path(home)
    if not path.is_file():
        raise MissingConfigError(path)
    return read_document(path, ToolConfig)


def write_config(home: Path, cfg: ToolConfig, *, silent: bool = False) -> Path:
    """Overwrite ``<home>/config`` with ``cfg``."""
    path = _config_path(home)
    encoded = write_document(path, cfg.model_dump(mode="json", by_alias=True))
    log = logger.debug if silent else logger.info
    log("Wrote config %s:\n%s", path, encoded)
    return path


def configure(home: Path, *, prompt: bool = False, save: bool = True) -> ToolConfig:
    """Create ``<home>/config`` from defaults, optionally asking for each value."""
    cfg = default_config(home)
    if prompt:
        cfg = cfg.model_copy(
            update={
                "artifactory": typer.prompt("Default artifactory", default=cfg.artifactory),
                "cache": typer.prompt("Default cache", default=cfg.cache),
                "container": typer.prompt("Default container", default=cfg.container),
            }
        )
    if save:
        write_config(home, cfg)
    return cfg


def upgrade_check_due(cfg: ToolConfig, now: datetime | None = None) -> bool:
    """Whether the last upgrade check is more than a day old."""
    now = now or datetime.now(timezone.utc)
    last = cfg.upgrade_check
    if last.tzinfo is None:
        last = last.replace(tzinfo=timezone.utc)
    return last < now - UPGRADE_CHECK_INTERVAL


def mark_upgrade_checked(home: Path, cfg: ToolConfig) -> ToolConfig:
    """Record that an upgrade check just happened and persist it."""
    updated = cfg.model_copy(update={"upgrade_check": datetime.now(timezone.utc)})
    write_config(home, updated, silent=True)
    return updated
