"""A resolved remote component."""

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """What the backend resolved a (name, version?, environment?) request to.

    ``version`` is always a concrete published integer; ``tarball`` is the
    URL the artifact is downloaded from and is treated as opaque.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: int
    environment: str = "global"
    tarball: str
