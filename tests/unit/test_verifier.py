"""Tests for the verifier — each check and the order they run in."""

from __future__ import annotations

from pathlib import Path

import pytest

from inputforge.core.verifier import verify, verify_lockfile
from inputforge.errors import (
    EnvironmentMismatchError,
    ExtraneousDependenciesError,
    InvalidVersionError,
    MissingDependenciesError,
    MissingLockfileError,
    MultipleEnvironmentsError,
    MultipleVersionsError,
    NonGlobalDependenciesError,
    ParseError,
)
from inputforge.models.manifest import Manifest


@pytest.fixture
def root(lock_factory):
    def _root(**children):
        return lock_factory("A", "0", "x", children)

    return _root


class TestVerifyLockfile:
    def test_clean_tree_passes(self, root, lock_factory):
        mf = Manifest(name="A", dependencies={"B": 3})
        verify_lockfile(mf, root(B=lock_factory("B", "3", "x")), "x")

    def test_missing_dependency(self, root):
        mf = Manifest(name="A", dependencies={"B": 3})
        with pytest.raises(MissingDependenciesError):
            verify_lockfile(mf, root(), "x")

    def test_core_only_tolerates_missing_dev(self, root, lock_factory):
        mf = Manifest(name="A", dependencies={"B": 3}, dev_dependencies={"T": 1})
        verify_lockfile(mf, root(B=lock_factory("B", "3", "x")), "x", core_only=True)

    def test_extraneous_dependency(self, root, lock_factory):
        mf = Manifest(name="A")
        with pytest.raises(ExtraneousDependenciesError) as excinfo:
            verify_lockfile(mf, root(B=lock_factory("B", "3", "x")), "x")
        assert excinfo.value.name == "B"

    def test_wrong_version(self, root, lock_factory):
        mf = Manifest(name="A", dependencies={"B": 3})
        with pytest.raises(InvalidVersionError):
            verify_lockfile(mf, root(B=lock_factory("B", "4", "x")), "x")

    def test_stash_version_at_top_level_is_invalid_version(self, root, lock_factory):
        mf = Manifest(name="A", dependencies={"B": 3})
        with pytest.raises(InvalidVersionError):
            verify_lockfile(mf, root(B=lock_factory("B", "wip", "x")), "x")

    def test_multiple_versions(self, root, lock_factory):
        # root -> C@1 -> D -> C@2
        deep_c = lock_factory("C", "2", "x")
        d = lock_factory("D", "1", "x", {"C": deep_c})
        c = lock_factory("C", "1", "x", {"D": d})
        mf = Manifest(name="A", dependencies={"C": 1})
        with pytest.raises(MultipleVersionsError) as excinfo:
            verify_lockfile(mf, root(C=c), "x")
        assert excinfo.value.name == "C"

    def test_multiple_environments(self, root, lock_factory):
        b = lock_factory("B", "3", "x", {"D": lock_factory("D", "1", "x")})
        c = lock_factory("C", "1", "x", {"D": lock_factory("D", "1", "y")})
        mf = Manifest(name="A", dependencies={"B": 3, "C": 1})
        with pytest.raises(MultipleEnvironmentsError) as excinfo:
            verify_lockfile(mf, root(B=b, C=c), "x")
        assert excinfo.value.name == "D"

    def test_environment_mismatch(self, root, lock_factory):
        mf = Manifest(name="A", dependencies={"B": 3})
        with pytest.raises(EnvironmentMismatchError) as excinfo:
            verify_lockfile(mf, root(B=lock_factory("B", "3", "y")), "x")
        assert excinfo.value.environment == "y"

    def test_stash_deep_in_closure(self, root, lock_factory):
        b = lock_factory("B", "3", "x", {"D": lock_factory("D", "wip", "x")})
        mf = Manifest(name="A", dependencies={"B": 3})
        with pytest.raises(NonGlobalDependenciesError) as excinfo:
            verify_lockfile(mf, root(B=b), "x")
        assert excinfo.value.name == "D"

    def test_versions_checked_before_environments(self, root, lock_factory):
        b = lock_factory("B", "3", "x", {"D": lock_factory("D", "1", "x")})
        c = lock_factory("C", "1", "x", {"D": lock_factory("D", "2", "y")})
        mf = Manifest(name="A", dependencies={"B": 3, "C": 1})
        with pytest.raises(MultipleVersionsError):
            verify_lockfile(mf, root(B=b, C=c), "x")


class TestVerifyInput:
    def test_verify_from_disk(self, workdir: Path, write_input_lock):
        write_input_lock("B", "3", "x")
        mf = Manifest(name="A", dependencies={"B": 3})
        lock = verify(mf, "x", workdir / "INPUT")
        assert lock.name == "A"
        assert lock.dependencies["B"].environment == "x"

    def test_membership_checked_before_lockfiles(self, workdir: Path):
        (workdir / "INPUT" / "Z").mkdir(parents=True)
        mf = Manifest(name="A")
        with pytest.raises(ExtraneousDependenciesError):
            verify(mf, "x", workdir / "INPUT")

    def test_missing_lockfile(self, workdir: Path):
        (workdir / "INPUT" / "B").mkdir(parents=True)
        mf = Manifest(name="A", dependencies={"B": 3})
        with pytest.raises(MissingLockfileError):
            verify(mf, "x", workdir / "INPUT")

    def test_verify_never_touches_input(self, workdir: Path, write_input_lock):
        write_input_lock("B", "4", "x")
        mf = Manifest(name="A", dependencies={"B": 3})
        with pytest.raises(InvalidVersionError):
            verify(mf, "x", workdir / "INPUT")
        assert (workdir / "INPUT" / "B" / "lockfile.json").is_file()

    def test_undecodable_lockfile_is_parse_error(self, workdir: Path):
        path = workdir / "INPUT" / "B" / "lockfile.json"
        path.parent.mkdir(parents=True)
        path.write_bytes(b'{"name": "B\xff"}')
        mf = Manifest(name="A", dependencies={"B": 3})
        with pytest.raises(ParseError):
            verify(mf, "x", workdir / "INPUT")
