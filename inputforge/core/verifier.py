"""Transitive integrity checks over INPUT and its lockfile tree.

Checks run in a fixed order and the first violation is raised:

1. every manifest dependency is present in INPUT
2. nothing in INPUT is absent from the manifest
3. each INPUT component is at the manifest's integer version
4. one version per component across the whole closure
5. one environment per component across the whole closure
6. top-level components were built in the requested environment
7. no stashed (non-integer) version anywhere in the closure

Verification never modifies INPUT.
"""

from __future__ import annotations

import logging
from pathlib import Path

from inputforge.core.lockfiles import (
    find_all_dependencies,
    find_all_environments,
    installed_components,
    populate_from_input,
)
from inputforge.errors import (
    EnvironmentMismatchError,
    ExtraneousDependenciesError,
    InvalidVersionError,
    MissingDependenciesError,
    MultipleEnvironmentsError,
    MultipleVersionsError,
    NonGlobalDependenciesError,
)
from inputforge.models.config import DEFAULT_CONTAINER
from inputforge.models.lockfile import Lockfile, parse_integer_version
from inputforge.models.manifest import Manifest

logger = logging.getLogger(__name__)


def _check_membership(manifest: Manifest, installed: list[str], *, core_only: bool) -> None:
    required = manifest.all_dependencies(core_only=core_only)
    known = manifest.all_dependencies()
    for name in sorted(required):
        if name not in installed:
            raise MissingDependenciesError(name)
    for name in installed:
        if name not in known:
            raise ExtraneousDependenciesError(name)


def verify_lockfile(
    manifest: Manifest, lock: Lockfile, environment: str, *, core_only: bool = False
) -> None:
    """Run every check against a populated root lockfile.

    ``lock.dependencies`` stands in for the contents of INPUT.
    """
    top_level = sorted(lock.dependencies)
    _check_membership(manifest, top_level, core_only=core_only)

    wanted = manifest.all_dependencies()
    for name in top_level:
        if lock.dependencies[name].integer_version != wanted[name]:
            raise InvalidVersionError(name)

    versions = find_all_dependencies(lock)
    for name in sorted(versions):
        if len(versions[name]) != 1:
            logger.debug("%s used at versions %s", name, sorted(versions[name]))
            raise MultipleVersionsError(name)

    environments = find_all_environments(lock)
    for name in sorted(environments):
        if len(environments[name]) != 1:
            raise MultipleEnvironmentsError(name)

    for name in top_level:
        env = lock.dependencies[name].environment
        if env != environment:
            raise EnvironmentMismatchError(name, env)

    for name in sorted(versions):
        for version in versions[name]:
            if parse_integer_version(version) is None:
                raise NonGlobalDependenciesError(name)


def verify(
    manifest: Manifest,
    environment: str,
    input_dir: Path = Path("INPUT"),
    *,
    core_only: bool = False,
    container: str = DEFAULT_CONTAINER,
) -> Lockfile:
    """Verify INPUT against the manifest; returns the populated lockfile."""
    # Directory membership first, before any lockfile has to be readable.
    _check_membership(manifest, installed_components(input_dir), core_only=core_only)
    root = Lockfile.new(manifest.name, container, environment=environment)
    lock = populate_from_input(root, input_dir)
    verify_lockfile(manifest, lock, environment, core_only=core_only)
    logger.info("Dependencies fully verified")
    return lock
