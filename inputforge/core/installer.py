"""Orchestrates fetch + extract for sets of dependencies.

Two entry points matter most:

* ``update`` — install explicit specifiers (``name``, ``name=3`` or
  ``name=label``), optionally saving integer versions to the manifest.
* ``fetch_all`` — install everything the manifest declares, reusing what
  INPUT already holds at the right version and environment. Any failure
  wipes INPUT so a half-installed tree is never left behind.

Per-item failures never stop the loop; they are collected and reported
once every item has been attempted.
"""

from __future__ import annotations

import io
import logging
import shutil
import tarfile
from pathlib import Path

from inputforge.core.cache import ArtifactCache
from inputforge.core.extractor import extract_tarball, install_tree
from inputforge.core.fetcher import Fetcher
from inputforge.core.lockfiles import read_input_lockfiles
from inputforge.core.manifest_store import ManifestStore
from inputforge.errors import InputforgeError, InstallFailureError, MissingComponentError
from inputforge.models.component import Component
from inputforge.models.lockfile import parse_integer_version

logger = logging.getLogger(__name__)

# Failures that are reported per item instead of aborting the whole loop.
ITEM_ERRORS = (InputforgeError, OSError)


def parse_specifier(spec: str) -> tuple[str, int | str | None]:
    """Split ``name[=version]`` into a name and an int, a stash label or None.

    Examples
    --------
    >>> parse_specifier("gtest")
    ('gtest', None)
    >>> parse_specifier("gtest=3")
    ('gtest', 3)
    >>> parse_specifier("gtest=wip")
    ('gtest', 'wip')
    """
    name, sep, version = spec.partition("=")
    if not name:
        raise ValueError(f"invalid component specifier {spec!r}")
    if not sep:
        return name, None
    if not version:
        raise ValueError(f"missing version in component specifier {spec!r}")
    as_int = parse_integer_version(version)
    return name, as_int if as_int is not None else version


class Installer:
    """Installs components into INPUT for one working directory.

    Parameters
    ----------
    fetcher:
        Resolves and caches remote tarballs.
    manifests:
        The working directory's manifest.
    input_dir:
        The staging area, normally ``./INPUT``.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        manifests: ManifestStore,
        input_dir: Path = Path("INPUT"),
    ) -> None:
        self.fetcher = fetcher
        self.manifests = manifests
        self.input_dir = Path(input_dir)

    @property
    def cache(self) -> ArtifactCache:
        return self.fetcher.cache

    # ------------------------------------------------------------------
    # Single component
    # ------------------------------------------------------------------

    def fetch_and_unpack(
        self, name: str, version: int | None = None, environment: str | None = None
    ) -> Component:
        tarball, component = self.fetcher.fetch(name, version, environment)
        extract_tarball(tarball, name, self.input_dir)
        return component

    def install_from_stash(self, name: str, label: str) -> Path:
        source = self.cache.path_of_stash(name, label)
        return install_tree(source, name, self.input_dir)

    def clean_input(self) -> None:
        if self.input_dir.is_dir():
            shutil.rmtree(self.input_dir)

    # ------------------------------------------------------------------
    # update / update_all
    # ------------------------------------------------------------------

    def update(
        self,
        components: list[str],
        *,
        save: bool = False,
        save_dev: bool = False,
        environment: str = "global",
    ) -> list[Component]:
        """Install specific components, latest unless a version is given.

        Integer installs are saved to ``dependencies`` (``save``) or
        ``devDependencies`` (``save_dev``). Stashed installs are never saved.
        """
        logger.debug("Update specific deps: %s", components)
        first_error: Exception | None = None
        updated: list[Component] = []

        for spec in components:
            logger.info("Fetch %s %s", environment, spec)
            try:
                name, version = parse_specifier(spec)
                if isinstance(version, str):
                    self.install_from_stash(name, version)
                else:
                    updated.append(self.fetch_and_unpack(name, version, environment))
            except (ValueError, *ITEM_ERRORS) as exc:
                logger.warning("Failed to update %s (%s)", spec, exc)
                if first_error is None:
                    first_error = exc

        if first_error is not None:
            raise first_error

        if save or save_dev:
            manifest = self.manifests.read()
            for c in updated:
                logger.debug("Successfully updated %s at version %d", c.name, c.version)
                manifest = manifest.with_dependency(c.name, c.version, dev=not save)
            self.manifests.write(manifest, force=True)
        return updated

    def update_all(
        self, *, save: bool = False, dev: bool = False, environment: str = "global"
    ) -> list[Component]:
        """Update every dependency (or devDependency) to its latest version."""
        manifest = self.manifests.read()
        deps = manifest.dev_dependencies if dev else manifest.dependencies
        return self.update(
            sorted(deps),
            save=save and not dev,
            save_dev=save and dev,
            environment=environment,
        )

    # ------------------------------------------------------------------
    # remove
    # ------------------------------------------------------------------

    def remove(self, names: list[str], *, save: bool = False, save_dev: bool = False) -> None:
        """Delete components from INPUT and, when saving, from the manifest."""
        logger.debug("Removing dependencies %s", names)
        if save or save_dev:
            manifest = self.manifests.read()
            for name in names:
                try:
                    manifest = manifest.without_dependency(name, dev=not save)
                except KeyError:
                    raise MissingComponentError(name) from None
                logger.debug("Removing %s from manifest", name)
            logger.info("Updating manifest with removed dependencies")
            self.manifests.write(manifest, force=True)

        for name in names:
            path = self.input_dir / name
            if path.is_dir():
                logger.debug("Deleting INPUT/%s", name)
                shutil.rmtree(path)

    # ------------------------------------------------------------------
    # fetch_all
    # ------------------------------------------------------------------

    def fetch_all(self, *, core_only: bool = False, environment: str = "global") -> list[Component]:
        """Install every dependency in the manifest at its pinned version."""
        manifest = self.manifests.read()
        logger.debug("Installing dependencies%s", "" if core_only else " and devDependencies")
        targets = manifest.all_dependencies(core_only=core_only)

        try:
            present = read_input_lockfiles(self.input_dir)
        except ITEM_ERRORS:
            logger.warning("Populating INPUT data failed - your INPUT may be corrupt")
            logger.warning("This can happen if you interrupt a fetch part-way")
            logger.warning("Try to remove INPUT and fetch again.")
            raise

        for name, lock in present.items():
            wanted = targets.get(name)
            if wanted is None:
                continue
            # Stashed (non-integer) versions are always replaced.
            if lock.integer_version == wanted and lock.environment == environment:
                logger.info("Reuse %s %s %d", environment, name, wanted)
                del targets[name]

        installed: list[Component] = []
        failed: list[str] = []
        first_error: Exception | None = None
        for name, version in sorted(targets.items()):
            logger.info("Fetch %s %s %d", environment, name, version)
            component_dir = self.input_dir / name
            if component_dir.is_dir():
                try:
                    shutil.rmtree(component_dir)
                except OSError as exc:
                    logger.warning("Failed to remove INPUT/%s - %s", name, exc)
                    logger.warning("Please clean out your INPUT folder yourself to avoid corruption")
                    raise
            try:
                installed.append(self.fetch_and_unpack(name, version, environment))
            except ITEM_ERRORS as exc:
                logger.warning("Failed to completely install %s (%s)", name, exc)
                failed.append(name)
                if first_error is None:
                    first_error = exc

        if failed:
            logger.warning("Cleaning potentially broken INPUT")
            self.clean_input()
            raise InstallFailureError(failed) from first_error
        return installed

    # ------------------------------------------------------------------
    # export
    # ------------------------------------------------------------------

    def export(
        self, spec: str, output_dir: Path = Path("."), environment: str | None = None
    ) -> Path:
        """Copy a component's tarball out of the cache as ``<name>.tar.gz``.

        Stashed builds are packed into a gzipped tarball on the way out.
        """
        name, version = parse_specifier(spec)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        dest = output_dir / f"{name}.tar.gz"
        logger.info("Export %s %s to %s", environment or "global", spec, output_dir)

        if isinstance(version, str):
            source = self.cache.path_of_stash(name, version)
            buf = io.BytesIO()
            with tarfile.open(fileobj=buf, mode="w:gz") as archive:
                for child in sorted(source.iterdir()):
                    archive.add(child, arcname=child.name)
            dest.write_bytes(buf.getvalue())
        else:
            tarball, _ = self.fetcher.fetch(name, version, environment)
            logger.debug("Copying %s to %s", tarball, dest)
            shutil.copyfile(tarball, dest)
        return dest
