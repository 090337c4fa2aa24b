"""Reading and writing ``manifest.json``.

Each mutation reads the file, modifies a copy and writes it back
atomically; mutations do not observe one another.
"""

from __future__ import annotations

import logging
from pathlib import Path

from inputforge.core.documents import read_document, write_document
from inputforge.errors import ManifestExistsError, MissingComponentError, MissingManifestError
from inputforge.models.manifest import Manifest

logger = logging.getLogger(__name__)


class ManifestStore:
    """The manifest of one working directory."""

    def __init__(self, path: Path = Path("manifest.json")) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Manifest:
        if not self.path.is_file():
            raise MissingManifestError()
        return read_document(self.path, Manifest)

    def write(self, manifest: Manifest, *, force: bool = False) -> None:
        """Persist ``manifest``; refuses to overwrite unless ``force``."""
        if self.path.exists() and not force:
            raise ManifestExistsError()
        encoded = write_document(self.path, manifest.to_document())
        logger.debug("Wrote manifest %s:\n%s", self.path, encoded)

    def init(self, name: str, *, force: bool = False) -> Manifest:
        """Create an empty manifest for component ``name``."""
        manifest = Manifest(name=name)
        self.write(manifest, force=force)
        logger.info("Created manifest for %s", name)
        return manifest

    def update_entry(self, name: str, version: int, *, dev: bool = False) -> Manifest:
        manifest = self.read().with_dependency(name, version, dev=dev)
        self.write(manifest, force=True)
        return manifest

    def remove_entry(self, name: str, *, dev: bool = False) -> Manifest:
        current = self.read()
        try:
            manifest = current.without_dependency(name, dev=dev)
        except KeyError:
            raise MissingComponentError(name) from None
        self.write(manifest, force=True)
        return manifest
