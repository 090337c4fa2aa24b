"""Artifact naming and remote access — the Artifactory backend.

Maps ``(name, version?, environment?)`` to a download URL and a concrete
integer version. Published artifacts live at::

    {base}/env/{environment}/{name}/{version}/{name}.tar.gz

The latest version is found through the Artifactory storage API listing
of ``env/{environment}/{name}``: the largest child folder whose name is an
integer wins.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import httpx

from inputforge.errors import ArtifactoryFailureError, ForgeIOError, MissingComponentError
from inputforge.models.component import Component
from inputforge.models.config import ToolConfig

logger = logging.getLogger(__name__)

GLOBAL_ENVIRONMENT = "global"


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Backend(Protocol):
    """Anything that can resolve components and download their tarballs."""

    def resolve(
        self, name: str, version: int | None = None, environment: str | None = None
    ) -> Component:
        """Resolve a request to a published component.

        Raises MissingComponentError if the name is unknown and
        ArtifactoryFailureError if the remote misbehaves.
        """
        ...

    def download(self, url: str, dest: Path) -> None:
        """Stream ``url`` into ``dest``; raises ArtifactoryFailureError on non-2xx."""
        ...


# ---------------------------------------------------------------------------
# Artifactory
# ---------------------------------------------------------------------------


class ArtifactoryBackend:
    """Backend for a generic Artifactory repository.

    Parameters
    ----------
    base_url:
        Repository root, e.g. ``https://host/artifactory/builds``.
    client:
        Optional preconfigured ``httpx.Client`` (tests pass one built on a
        ``MockTransport``). When omitted the backend owns its own client.
    timeout:
        Request timeout in seconds for an owned client.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.Client | None = None,
        *,
        timeout: float = 5.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    @classmethod
    def from_config(
        cls, cfg: ToolConfig, client: httpx.Client | None = None, *, timeout: float = 5.0
    ) -> ArtifactoryBackend:
        return cls(cfg.artifactory, client, timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> ArtifactoryBackend:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def tarball_url(self, name: str, version: int, environment: str) -> str:
        return f"{self.base_url}/env/{environment}/{name}/{version}/{name}.tar.gz"

    def storage_url(self, path: str) -> str:
        """URL of the storage API listing for a repository-relative path."""
        marker = "/artifactory/"
        if marker in self.base_url:
            server, repo = self.base_url.split(marker, 1)
            return f"{server}/artifactory/api/storage/{repo}/{path}"
        return f"{self.base_url}/api/storage/{path}"

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _get(self, url: str) -> httpx.Response:
        logger.debug("GET %s", url)
        try:
            return self._client.get(url)
        except httpx.TransportError as exc:
            raise ForgeIOError(f"GET {url} failed: {exc}") from exc

    def latest_version(self, name: str, environment: str = GLOBAL_ENVIRONMENT) -> int:
        """Return the highest published integer version of ``name``."""
        res = self._get(self.storage_url(f"env/{environment}/{name}"))
        if res.status_code == 404:
            raise MissingComponentError(name)
        if not res.is_success:
            raise ArtifactoryFailureError(f"GET request with {res.status_code}")
        try:
            children = res.json().get("children", [])
        except ValueError as exc:
            raise ArtifactoryFailureError(f"unreadable listing for {name}") from exc

        versions = []
        for child in children:
            if not child.get("folder", False):
                continue
            label = str(child.get("uri", "")).strip("/")
            if label.isascii() and label.isdigit():
                versions.append(int(label))
        if not versions:
            raise MissingComponentError(name)
        latest = max(versions)
        logger.debug("Latest %s %s is %d", environment, name, latest)
        return latest

    def resolve(
        self, name: str, version: int | None = None, environment: str | None = None
    ) -> Component:
        env = environment or GLOBAL_ENVIRONMENT
        if version is None:
            version = self.latest_version(name, env)
        return Component(
            name=name,
            version=version,
            environment=env,
            tarball=self.tarball_url(name, version, env),
        )

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def download(self, url: str, dest: Path) -> None:
        logger.debug("GET %s -> %s", url, dest)
        dest = Path(dest)
        try:
            with self._client.stream("GET", url) as res:
                if not res.is_success:
                    raise ArtifactoryFailureError(f"GET request with {res.status_code}")
                with dest.open("wb") as fh:
                    for chunk in res.iter_bytes():
                        fh.write(chunk)
        except httpx.TransportError as exc:
            dest.unlink(missing_ok=True)
            raise ForgeIOError(f"GET {url} failed: {exc}") from exc
        except BaseException:
            dest.unlink(missing_ok=True)
            raise
