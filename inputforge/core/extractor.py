"""Unpack artifacts into the ``INPUT/<name>/`` staging area."""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path

from inputforge.core.cache import replace_directory
from inputforge.errors import ForgeIOError

logger = logging.getLogger(__name__)


def _member_filter(member: tarfile.TarInfo, dest_path: str) -> tarfile.TarInfo:
    """Keep members inside ``dest``; symlink targets are left as published."""
    member = tarfile.tar_filter(member, dest_path)
    if member.islnk():
        return tarfile.data_filter(member, dest_path)
    return member


def extract_tarball(tarball: Path, component: str, input_dir: Path = Path("INPUT")) -> Path:
    """Replace ``INPUT/<component>/`` with the contents of a gzipped tarball.

    If unpacking fails part-way the destination is left corrupt; callers
    are expected to clean INPUT before reporting the failure.
    """
    dest = Path(input_dir) / component
    shutil.rmtree(dest, ignore_errors=True)
    dest.mkdir(parents=True)
    logger.debug("Unpacking tarball %s for %s", tarball, component)
    try:
        with tarfile.open(tarball, "r:gz") as archive:
            archive.extractall(dest, filter=_member_filter)
    except tarfile.TarError as exc:
        raise ForgeIOError(f"cannot unpack {tarball}: {exc}") from exc
    return dest


def install_tree(source: Path, component: str, input_dir: Path = Path("INPUT")) -> Path:
    """Replace ``INPUT/<component>/`` with a copy of a stashed directory tree."""
    input_dir = Path(input_dir)
    input_dir.mkdir(parents=True, exist_ok=True)
    dest = input_dir / component
    staging = input_dir / f".{component}.staging"
    shutil.rmtree(staging, ignore_errors=True)
    logger.debug("Copying stashed %s -> %s", source, dest)
    try:
        shutil.copytree(source, staging, symlinks=True)
        replace_directory(staging, dest)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise
    return dest
