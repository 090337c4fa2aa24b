"""End-to-end scenarios — manifest to INPUT to verification.

These exercise ArtifactoryBackend (over a mock transport), ArtifactCache,
Fetcher, the extractor, Installer, lockfile population and the verifier
working together.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from inputforge.core.installer import Installer
from inputforge.core.lockfiles import populate_from_input, write_lockfile
from inputforge.core.verifier import verify, verify_lockfile
from inputforge.errors import InstallFailureError, MultipleVersionsError
from inputforge.models.lockfile import Lockfile


class TestScenarios:
    @pytest.fixture
    def manifest_ab(self, write_manifest):
        return write_manifest("A", {"B": 3})

    def test_cold_fetch(self, installer: Installer, remote, cache, workdir: Path, manifest_ab):
        remote.publish("B", 3, "x")
        installer.fetch_all(core_only=True, environment="x")

        assert cache.path_of("B", 3, "x") == cache.root / "globals" / "x" / "B" / "3" / "B.tar"
        assert cache.is_cached("B", 3, "x")
        lock = json.loads((workdir / "INPUT" / "B" / "lockfile.json").read_text())
        assert (lock["name"], lock["version"], lock["environment"]) == ("B", "3", "x")
        assert not (workdir / "B.tar").exists()

    def test_warm_reuse(self, installer: Installer, remote, manifest_ab):
        remote.publish("B", 3, "x")
        installer.fetch_all(core_only=True, environment="x")
        before = len(remote.requests)
        assert installer.fetch_all(core_only=True, environment="x") == []
        assert len(remote.requests) == before

    def test_reuse_after_input_removed_hits_cache(self, installer: Installer, remote, workdir: Path, manifest_ab):
        remote.publish("B", 3, "x")
        installer.fetch_all(core_only=True, environment="x")
        installer.clean_input()
        installer.fetch_all(core_only=True, environment="x")
        assert len(remote.downloads) == 1
        assert (workdir / "INPUT" / "B" / "lockfile.json").is_file()

    def test_mismatched_environment(self, installer: Installer, remote, cache, workdir: Path, manifest_ab):
        remote.publish("B", 3, "x")
        remote.publish("B", 3, "y")
        installer.fetch_all(core_only=True, environment="x")
        installer.fetch_all(core_only=True, environment="y")

        assert [r.url.path for r in remote.downloads] == [
            "/artifactory/builds/env/x/B/3/B.tar.gz",
            "/artifactory/builds/env/y/B/3/B.tar.gz",
        ]
        assert cache.is_cached("B", 3, "y")
        lock = json.loads((workdir / "INPUT" / "B" / "lockfile.json").read_text())
        assert lock["environment"] == "y"

    def test_stash_then_reinstall(self, installer: Installer, remote, cache, tmp_path: Path, workdir: Path, write_manifest):
        manifest = write_manifest("A", {"B": 3})
        before = installer.manifests.path.read_text()
        output = tmp_path / "OUTPUT"
        (output / "bin").mkdir(parents=True)
        (output / "bin" / "b").write_text("local build")
        write_lockfile(output / "lockfile.json", Lockfile.new("B", "img", environment="x"))
        cache.stash_output("B", "wip", output)

        installer.update(["B=wip"], save=False, save_dev=False, environment="x")
        assert (workdir / "INPUT" / "B" / "bin" / "b").read_text() == "local build"
        assert installer.manifests.path.read_text() == before
        assert installer.manifests.read() == manifest
        assert remote.requests == []

    def test_multi_version_violation(self, lock_factory, write_manifest):
        manifest = write_manifest("A", {"C": 1})
        deep = lock_factory("D", "1", "x", {"C": lock_factory("C", "2", "x")})
        c1 = lock_factory("C", "1", "x", {"D": deep})
        root = lock_factory("A", "0", "x", {"C": c1})
        with pytest.raises(MultipleVersionsError) as excinfo:
            verify_lockfile(manifest, root, "x")
        assert excinfo.value.name == "C"

    def test_partial_install_rollback(self, installer: Installer, remote, workdir: Path, write_manifest):
        write_manifest("A", {"B": 3, "C": 1})
        remote.publish("B", 3, "x")
        remote.publish("C", 1, "x")
        remote.failing.add("C")
        with pytest.raises(InstallFailureError):
            installer.fetch_all(environment="x")
        assert not (workdir / "INPUT").exists()

    def test_fetch_then_verify(self, installer: Installer, remote, workdir: Path, write_manifest):
        manifest = write_manifest("A", {"B": 3}, {"T": 1})
        remote.publish("B", 3, "x", dependencies={"D": Lockfile.new("D", "img", "5", environment="x")})
        remote.publish("T", 1, "x")
        installer.fetch_all(environment="x")

        lock = verify(manifest, "x", workdir / "INPUT")
        assert sorted(lock.dependencies) == ["B", "T"]
        assert lock.dependencies["B"].dependencies["D"].version == "5"

        rebuilt = populate_from_input(Lockfile.new("A", "img"), workdir / "INPUT")
        assert rebuilt.dependencies == lock.dependencies
