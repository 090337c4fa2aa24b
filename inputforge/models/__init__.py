"""inputforge data models — all Pydantic v2, all frozen (immutable)."""

from inputforge.models.component import Component
from inputforge.models.config import ToolConfig
from inputforge.models.lockfile import Container, Lockfile
from inputforge.models.manifest import Manifest

__all__ = [
    "Component",
    "Container",
    "Lockfile",
    "Manifest",
    "ToolConfig",
]
