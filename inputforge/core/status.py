"""Summary of the manifest against what INPUT currently holds."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from inputforge.core.lockfiles import installed_components, read_component_lockfile
from inputforge.errors import InputforgeError
from inputforge.models.manifest import Manifest


class DependencyState(str, Enum):
    OK = "ok"
    MISSING = "missing"
    EXTRANEOUS = "extraneous"
    MISMATCH = "mismatch"


class DependencyStatus(BaseModel):
    """One row of ``inputforge status``."""

    model_config = ConfigDict(frozen=True)

    name: str
    requested: int | None = None
    installed: str | None = None
    environment: str | None = None
    dev: bool = False
    state: DependencyState


def status(manifest: Manifest, input_dir: Path = Path("INPUT")) -> list[DependencyStatus]:
    """One row per name in the manifest or INPUT, sorted by name."""
    wanted = manifest.all_dependencies()
    present = installed_components(input_dir)
    rows: list[DependencyStatus] = []

    for name in sorted(set(wanted) | set(present)):
        requested = wanted.get(name)
        installed = environment = None
        if name in present:
            try:
                lock = read_component_lockfile(name, input_dir)
                installed, environment = lock.version, lock.environment
            except InputforgeError:
                installed = None

        if name not in present:
            state = DependencyState.MISSING
        elif requested is None:
            state = DependencyState.EXTRANEOUS
        elif installed is not None and installed == str(requested):
            state = DependencyState.OK
        else:
            state = DependencyState.MISMATCH

        rows.append(
            DependencyStatus(
                name=name,
                requested=requested,
                installed=installed,
                environment=environment,
                dev=manifest.is_dev(name),
                state=state,
            )
        )
    return rows
