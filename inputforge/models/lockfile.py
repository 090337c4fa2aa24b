"""Lockfile model — the recursive record of what a build consumed."""

from __future__ import annotations

import secrets

from pydantic import BaseModel, ConfigDict, Field, model_validator

import inputforge

EXPERIMENTAL_PREFIX = "EXPERIMENTAL+"


def experimental_version() -> str:
    """A version marker that can never be mistaken for a published integer."""
    return f"{EXPERIMENTAL_PREFIX}{secrets.randbits(64):x}"


def parse_integer_version(version: str) -> int | None:
    """Return the version as an int if it is a published (integer) version."""
    if version.isascii() and version.isdigit():
        return int(version)
    return None


class Container(BaseModel):
    """The docker image and tag a component was built in."""

    model_config = ConfigDict(frozen=True)

    image: str
    tag: str = "latest"

    @classmethod
    def parse(cls, container: str) -> Container:
        """Split ``image[:tag]``; the tag defaults to ``latest``.

        A colon belonging to a registry port (``host:5000/img``) is not a tag.
        """
        image, sep, tag = container.rpartition(":")
        if not sep or "/" in tag:
            return cls(image=container)
        return cls(image=image, tag=tag)

    def __str__(self) -> str:
        return f"{self.image}:{self.tag}"


class Lockfile(BaseModel):
    """One node of the lockfile tree.

    ``dependencies`` maps a component name to the lockfile of that
    component, which in turn holds its own dependencies. Every child is
    stored under its own ``name``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    config: str = "release"
    environment: str = "global"
    container: Container
    tool: str = ""
    dependencies: dict[str, Lockfile] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_child_keys(self) -> Lockfile:
        for key, child in self.dependencies.items():
            if key != child.name:
                raise ValueError(
                    f"dependency stored as {key!r} is named {child.name!r}"
                )
        return self

    @classmethod
    def new(
        cls,
        name: str,
        container: str,
        version: str | None = None,
        build_config: str | None = None,
        environment: str = "global",
    ) -> Lockfile:
        """Stamp a fresh node; an unspecified version is marked experimental."""
        return cls(
            name=name,
            version=version or experimental_version(),
            config=build_config or "release",
            environment=environment,
            container=Container.parse(container),
            tool=inputforge.__version__,
        )

    @property
    def integer_version(self) -> int | None:
        return parse_integer_version(self.version)

    def with_dependencies(self, dependencies: dict[str, Lockfile]) -> Lockfile:
        return self.model_copy(update={"dependencies": dict(dependencies)})
