"""Shared test fixtures for inputforge."""

from __future__ import annotations

import io
import json
import tarfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from inputforge.core.backend import ArtifactoryBackend
from inputforge.core.cache import ArtifactCache
from inputforge.core.fetcher import Fetcher
from inputforge.core.installer import Installer
from inputforge.core.manifest_store import ManifestStore
from inputforge.models.lockfile import Container, Lockfile
from inputforge.models.manifest import Manifest

BASE_URL = "https://artifacts.test/artifactory/builds"


def make_lock(
    name: str,
    version: str = "1",
    environment: str = "global",
    dependencies: dict[str, Lockfile] | None = None,
) -> Lockfile:
    """A lockfile node with test defaults."""
    return Lockfile(
        name=name,
        version=version,
        environment=environment,
        container=Container(image="build", tag="latest"),
        tool="0.1.0",
        dependencies=dependencies or {},
    )


def make_tarball(
    lock: Lockfile | None,
    files: dict[str, bytes] | None = None,
    symlinks: dict[str, str] | None = None,
) -> bytes:
    """Gzipped tar bytes holding ``lockfile.json`` (unless None), extra files and symlinks."""
    members = dict(files or {})
    if lock is not None:
        members["lockfile.json"] = json.dumps(lock.model_dump(mode="json"), indent=2).encode()
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as archive:
        for name, data in sorted(members.items()):
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
        for name, target in sorted((symlinks or {}).items()):
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            archive.addfile(info)
    return buf.getvalue()


class FakeArtifactory:
    """In-memory Artifactory serving tarballs and storage listings.

    Every request is recorded in ``requests`` so tests can count GETs.
    """

    def __init__(self) -> None:
        self.artifacts: dict[tuple[str, str, int], bytes] = {}
        self.failing: set[str] = set()
        self.requests: list[httpx.Request] = []

    def publish(
        self,
        name: str,
        version: int,
        environment: str = "global",
        *,
        dependencies: dict[str, Lockfile] | None = None,
        files: dict[str, bytes] | None = None,
        symlinks: dict[str, str] | None = None,
    ) -> bytes:
        lock = make_lock(name, str(version), environment, dependencies)
        data = make_tarball(lock, files, symlinks)
        self.artifacts[(environment, name, version)] = data
        return data

    @property
    def downloads(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(".tar.gz")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        # /artifactory/api/storage/builds/env/{env}/{name}
        if parts[:3] == ["artifactory", "api", "storage"]:
            _, _, _, _, _, env, name = parts
            versions = [v for (e, n, v) in self.artifacts if e == env and n == name]
            if not versions:
                return httpx.Response(404, json={"errors": [{"status": 404}]})
            children = [{"uri": f"/{v}", "folder": True} for v in versions]
            children.append({"uri": "/maven-metadata.xml", "folder": False})
            return httpx.Response(200, json={"children": children})
        # /artifactory/builds/env/{env}/{name}/{version}/{name}.tar.gz
        _, _, _, env, name, version, _ = parts
        if name in self.failing:
            return httpx.Response(500, text="internal error")
        data = self.artifacts.get((env, name, int(version)))
        if data is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, content=data)


@pytest.fixture
def remote() -> FakeArtifactory:
    return FakeArtifactory()


@pytest.fixture
def backend(remote: FakeArtifactory) -> ArtifactoryBackend:
    client = httpx.Client(transport=httpx.MockTransport(remote.handler))
    return ArtifactoryBackend(BASE_URL, client)


@pytest.fixture
def cache(tmp_path: Path) -> ArtifactCache:
    return ArtifactCache(tmp_path / "cache")


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def manifests(workdir: Path) -> ManifestStore:
    return ManifestStore(workdir / "manifest.json")


@pytest.fixture
def write_manifest(manifests: ManifestStore) -> Callable[..., Manifest]:
    """Factory fixture: persist a manifest with the given maps."""

    def _factory(
        name: str = "A",
        dependencies: dict[str, int] | None = None,
        dev_dependencies: dict[str, int] | None = None,
    ) -> Manifest:
        manifest = Manifest(
            name=name,
            dependencies=dependencies or {},
            dev_dependencies=dev_dependencies or {},
        )
        manifests.write(manifest, force=True)
        return manifest

    return _factory


@pytest.fixture
def installer(
    backend: ArtifactoryBackend, cache: ArtifactCache, manifests: ManifestStore, workdir: Path
) -> Installer:
    fetcher = Fetcher(backend, cache, scratch_dir=workdir)
    return Installer(fetcher, manifests, workdir / "INPUT")


@pytest.fixture
def write_input_lock(workdir: Path) -> Callable[..., Path]:
    """Factory fixture: place ``INPUT/<name>/lockfile.json`` directly."""

    def _factory(name: str, version: str = "1", environment: str = "global", **kw: Any) -> Path:
        path = workdir / "INPUT" / name
        path.mkdir(parents=True, exist_ok=True)
        lock = make_lock(name, version, environment, kw.get("dependencies"))
        (path / "lockfile.json").write_text(json.dumps(lock.model_dump(mode="json")))
        return path

    return _factory


@pytest.fixture
def lock_factory() -> Callable[..., Lockfile]:
    """Factory fixture: build a Lockfile node with test defaults."""
    return make_lock


@pytest.fixture
def tarball_factory() -> Callable[..., bytes]:
    """Factory fixture: build gzipped tarball bytes."""
    return make_tarball
