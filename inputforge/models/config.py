"""User configuration model — the JSON document at ``<home>/config``."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ARTIFACTORY = "https://artifactory.example.com/artifactory/builds"
DEFAULT_CONTAINER = "inputforge/build:latest"


def _two_days_ago() -> datetime:
    # A fresh config always triggers an upgrade check on first use.
    return datetime.now(timezone.utc) - timedelta(days=2)


class ToolConfig(BaseModel):
    """Location of the remote, the cache root and the build container.

    Field names on disk are camel-case (``upgradeCheck``); the Python
    attribute is ``upgrade_check``. Only ``artifactory`` and ``cache``
    are consumed by the fetch/verify engine.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    artifactory: str = DEFAULT_ARTIFACTORY
    cache: str
    container: str = DEFAULT_CONTAINER
    upgrade_check: datetime = Field(default_factory=_two_days_ago, alias="upgradeCheck")
