"""Manifest model — what the current component depends on."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator


class Manifest(BaseModel):
    """The ``manifest.json`` of a working directory.

    Unknown fields are rejected. A name may appear in at most one of the
    two dependency maps and never as a dependency of itself.

    Examples
    --------
    >>> mf = Manifest(name="A", dependencies={"B": 3})
    >>> mf.with_dependency("C", 1, dev=True).dev_dependencies
    {'C': 1}
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1)
    dependencies: dict[str, NonNegativeInt] = Field(default_factory=dict)
    dev_dependencies: dict[str, NonNegativeInt] = Field(
        default_factory=dict, alias="devDependencies"
    )

    @model_validator(mode="after")
    def _check_maps(self) -> Manifest:
        overlap = sorted(set(self.dependencies) & set(self.dev_dependencies))
        if overlap:
            raise ValueError(
                f"{', '.join(overlap)} listed in both dependencies and devDependencies"
            )
        if self.name in self.dependencies or self.name in self.dev_dependencies:
            raise ValueError(f"{self.name} cannot depend on itself")
        return self

    def all_dependencies(self, *, core_only: bool = False) -> dict[str, int]:
        """Return ``dependencies`` merged with ``devDependencies`` unless core_only."""
        deps = dict(self.dependencies)
        if not core_only:
            deps.update(self.dev_dependencies)
        return deps

    def is_dev(self, name: str) -> bool:
        return name in self.dev_dependencies

    def with_dependency(self, name: str, version: int, *, dev: bool = False) -> Manifest:
        """Return a copy with ``name`` pinned to ``version`` in the chosen map.

        The name is dropped from the other map so the two stay disjoint.
        """
        core = dict(self.dependencies)
        devs = dict(self.dev_dependencies)
        target, other = (devs, core) if dev else (core, devs)
        other.pop(name, None)
        target[name] = version
        return Manifest(name=self.name, dependencies=core, dev_dependencies=devs)

    def without_dependency(self, name: str, *, dev: bool = False) -> Manifest:
        """Return a copy with ``name`` removed from the chosen map.

        Raises KeyError if the name is not in that map.
        """
        core = dict(self.dependencies)
        devs = dict(self.dev_dependencies)
        del (devs if dev else core)[name]
        return Manifest(name=self.name, dependencies=core, dev_dependencies=devs)

    def to_document(self) -> dict:
        """Serializable form using the on-disk field names."""
        return self.model_dump(mode="json", by_alias=True)
