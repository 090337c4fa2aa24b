"""Download-once pipeline from the remote into the local cache."""

from __future__ import annotations

import logging
from pathlib import Path

from inputforge.core.backend import Backend
from inputforge.core.cache import ArtifactCache
from inputforge.errors import MissingTarballError
from inputforge.models.component import Component

logger = logging.getLogger(__name__)


class Fetcher:
    """Resolve a component, download it on a cache miss, return the cached tarball.

    Downloads land in ``scratch_dir/<name>.tar`` (outside the cache) and are
    only moved into the cache once complete, so a partial download can never
    be seen as a cache hit.
    """

    def __init__(self, backend: Backend, cache: ArtifactCache, scratch_dir: Path = Path(".")) -> None:
        self.backend = backend
        self.cache = cache
        self.scratch_dir = Path(scratch_dir)

    def fetch(
        self, name: str, version: int | None = None, environment: str | None = None
    ) -> tuple[Path, Component]:
        logger.debug("Locate component %s", name)
        component = self.backend.resolve(name, version, environment)
        env = component.environment

        if not self.cache.is_cached(name, component.version, env):
            scratch = self.scratch_dir / f"{name}.tar"
            self.backend.download(component.tarball, scratch)
            self.cache.store_tarball(name, component.version, env, scratch)

        tarball = self.cache.path_of(name, component.version, env)
        if not tarball.is_file():
            raise MissingTarballError(tarball)
        logger.debug("Fetching %s from cache", name)
        return tarball, component
