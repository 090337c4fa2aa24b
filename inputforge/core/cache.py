"""Local artifact cache — published tarballs and stashed builds.

Storage layout under the configured cache root::

    globals/{environment}/{name}/{version}/{name}.tar   — append-only
    stash/{name}/{label}/...                            — copies of OUTPUT

A published tarball, once stored, is never overwritten. Every write lands
under a sibling temporary name first and is renamed into place, so a
reader never observes a partial file or directory.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from pathlib import Path

from inputforge.errors import (
    InvalidStashNameError,
    MissingBuildError,
    MissingStashArtifactError,
    MissingTarballError,
)
from inputforge.models.config import ToolConfig
from inputforge.models.lockfile import parse_integer_version

logger = logging.getLogger(__name__)


class ArtifactCache:
    """Keyed by (environment, name, version) for published artifacts and by
    (name, label) for stashed ones.

    Parameters
    ----------
    root:
        Cache root directory. Created lazily on first write.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @classmethod
    def from_config(cls, cfg: ToolConfig) -> ArtifactCache:
        return cls(Path(cfg.cache).expanduser())

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Published tarballs
    # ------------------------------------------------------------------

    def directory_of(self, name: str, version: int, environment: str) -> Path:
        return self._root / "globals" / environment / name / str(version)

    def path_of(self, name: str, version: int, environment: str) -> Path:
        """Where the tarball for this key lives; does not check existence."""
        return self.directory_of(name, version, environment) / f"{name}.tar"

    def is_cached(self, name: str, version: int, environment: str) -> bool:
        return self.path_of(name, version, environment).is_file()

    def store_tarball(
        self, name: str, version: int, environment: str, source_path: Path
    ) -> Path:
        """Move a downloaded tarball into the cache.

        A no-op if the key is already cached; the source is consumed either way.
        """
        source_path = Path(source_path)
        if not source_path.is_file():
            raise MissingTarballError(source_path)

        dest = self.path_of(name, version, environment)
        if dest.is_file():
            logger.debug("%s already cached; discarding %s", dest, source_path)
            source_path.unlink()
            return dest

        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp")
        os.close(fd)
        try:
            shutil.copyfile(source_path, tmp_name)
            logger.debug("Move %s -> %s", source_path, dest)
            os.replace(tmp_name, dest)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        source_path.unlink()
        return dest

    # ------------------------------------------------------------------
    # Stash
    # ------------------------------------------------------------------

    def stash_path(self, name: str, label: str) -> Path:
        """Directory of a stash; both parts must be single path components."""
        _check_stash_segment(name)
        _check_stash_segment(label)
        base = self._root / "stash" / name
        path = base / label
        if not path.resolve().is_relative_to(base.resolve()):
            raise InvalidStashNameError(label, "resolves outside the stash")
        return path

    def stash_output(self, owner_name: str, label: str, source_dir: Path) -> Path:
        """Copy a build's OUTPUT tree into the stash under ``owner_name/label``.

        Integer labels are refused since they would shadow published versions.
        An existing stash under the same label is replaced.
        """
        as_int = parse_integer_version(label)
        if as_int is not None:
            raise InvalidStashNameError(as_int)
        dest = self.stash_path(owner_name, label)
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise MissingBuildError()

        dest.parent.mkdir(parents=True, exist_ok=True)
        staging = dest.parent / f".{label}.{uuid.uuid4().hex[:8]}.tmp"
        logger.info("Stashing %s into cache under %s/%s", source_dir, owner_name, label)
        try:
            shutil.copytree(source_dir, staging, symlinks=True)
            replace_directory(staging, dest)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        return dest

    def path_of_stash(self, name: str, label: str) -> Path:
        path = self.stash_path(name, label)
        if not path.is_dir():
            raise MissingStashArtifactError(f"{name}={label}")
        return path


def replace_directory(staging: Path, dest: Path) -> None:
    """Swap a fully written ``staging`` directory into ``dest``.

    Directories cannot be renamed over non-empty ones, so any existing
    ``dest`` is first renamed aside and removed after the swap.
    """
    retired: Path | None = None
    if dest.exists():
        retired = dest.parent / f".{dest.name}.{uuid.uuid4().hex[:8]}.old"
        os.replace(dest, retired)
    os.replace(staging, dest)
    if retired is not None:
        shutil.rmtree(retired, ignore_errors=True)


def _check_stash_segment(segment: str) -> None:
    if segment in ("", ".", ".."):
        raise InvalidStashNameError(segment, "not a usable directory name")
    separators = [os.sep, "/"] + ([os.altsep] if os.altsep else [])
    if any(sep in segment for sep in separators):
        raise InvalidStashNameError(segment, "must not contain a path separator")
