"""Lockfile I/O and closure traversal.

A working directory's lockfile is rebuilt from ``INPUT/``: every
immediate subdirectory contributes the ``lockfile.json`` shipped inside
its artifact as a child of the root node.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from pathlib import Path

from inputforge.core.documents import read_document, write_document
from inputforge.errors import DependencyDepthError, MissingLockfileError
from inputforge.models.lockfile import Lockfile

logger = logging.getLogger(__name__)

LOCKFILE_NAME = "lockfile.json"
MAX_DEPTH = 64

# name of component -> {version, other_version, ...}
DependencyUsage = dict[str, set[str]]


def read_lockfile(path: Path) -> Lockfile:
    return read_document(path, Lockfile)


def write_lockfile(path: Path, lock: Lockfile, *, silent: bool = True) -> None:
    encoded = write_document(path, lock.model_dump(mode="json"))
    log = logger.debug if silent else logger.info
    log("Wrote lockfile %s:\n%s", path, encoded)


def installed_components(input_dir: Path = Path("INPUT")) -> list[str]:
    """Names of the component directories currently in INPUT (sorted)."""
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        return []
    return sorted(
        p.name for p in input_dir.iterdir() if p.is_dir() and not p.name.startswith(".")
    )


def read_component_lockfile(name: str, input_dir: Path = Path("INPUT")) -> Lockfile:
    path = Path(input_dir) / name / LOCKFILE_NAME
    if not path.is_file():
        raise MissingLockfileError(name)
    return read_lockfile(path)


def read_input_lockfiles(input_dir: Path = Path("INPUT")) -> dict[str, Lockfile]:
    """Lockfile of every component in INPUT, keyed by directory name."""
    found: dict[str, Lockfile] = {}
    for name in installed_components(input_dir):
        logger.debug("Populating lockfile with %s", name)
        lock = read_component_lockfile(name, input_dir)
        if lock.name != name:
            logger.warning(
                "INPUT/%s holds a lockfile named %s; treating it as %s", name, lock.name, name
            )
            lock = lock.model_copy(update={"name": name})
        found[name] = lock
    return found


def populate_from_input(lock: Lockfile, input_dir: Path = Path("INPUT")) -> Lockfile:
    """Return ``lock`` with its dependencies replaced by what INPUT holds."""
    return lock.with_dependencies(read_input_lockfiles(input_dir))


# ---------------------------------------------------------------------------
# Closure traversal
# ---------------------------------------------------------------------------


def _collect(
    lock: Lockfile, pick: Callable[[Lockfile], str], acc: DependencyUsage, depth: int
) -> None:
    if depth > MAX_DEPTH:
        raise DependencyDepthError(lock.name, MAX_DEPTH)
    for name, dep in lock.dependencies.items():
        acc[name].add(pick(dep))
        _collect(dep, pick, acc, depth + 1)


def find_all_dependencies(lock: Lockfile) -> DependencyUsage:
    """Map every name in the closure below ``lock`` to the versions used."""
    acc: DependencyUsage = defaultdict(set)
    _collect(lock, lambda dep: dep.version, acc, 1)
    return dict(acc)


def find_all_environments(lock: Lockfile) -> DependencyUsage:
    """Map every name in the closure below ``lock`` to the environments used."""
    acc: DependencyUsage = defaultdict(set)
    _collect(lock, lambda dep: dep.environment, acc, 1)
    return dict(acc)
