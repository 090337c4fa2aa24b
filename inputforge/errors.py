"""Error hierarchy for inputforge.

Every failure the tool reports deliberately is an ``InputforgeError``.
The CLI turns these into a one-line message and exit code 1; anything
else is a bug and is allowed to propagate with a traceback.

Filesystem errors are plain ``OSError`` and propagate unchanged.
"""

from __future__ import annotations


class InputforgeError(RuntimeError):
    """Base class for all errors raised deliberately by inputforge."""


# ---------------------------------------------------------------------------
# I/O and decoding
# ---------------------------------------------------------------------------


class ForgeIOError(InputforgeError):
    """A network or archive primitive failed (plain OSErrors propagate as-is)."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"I/O failure: {detail}")


class ParseError(InputforgeError):
    """A config, manifest or lockfile document failed to decode."""

    def __init__(self, path: object, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to parse {path}: {detail}")


# ---------------------------------------------------------------------------
# Config and manifest
# ---------------------------------------------------------------------------


class MissingManifestError(InputforgeError):
    def __init__(self) -> None:
        super().__init__("No manifest.json found")


class MissingConfigError(InputforgeError):
    def __init__(self, location: object = "~/.inputforge/config") -> None:
        self.location = location
        super().__init__(f"No config found at {location} (run `inputforge configure`)")


class ManifestExistsError(InputforgeError):
    def __init__(self) -> None:
        super().__init__("Manifest already exists (use --force to overwrite)")


class MissingComponentError(InputforgeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Component '{name}' not found")


# ---------------------------------------------------------------------------
# Cache and stash
# ---------------------------------------------------------------------------


class MissingLockfileError(InputforgeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No lockfile found in INPUT/{name}")


class MissingTarballError(InputforgeError):
    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Tarball missing at {path}")


class MissingBuildError(InputforgeError):
    def __init__(self) -> None:
        super().__init__("No build found in OUTPUT")


class MissingStashArtifactError(InputforgeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No stashed artifact '{name}' found in the cache")


class InvalidStashNameError(InputforgeError):
    def __init__(self, label: int | str, reason: str = "must not be an integer") -> None:
        self.label = label
        super().__init__(f"Invalid name '{label}' to stash under - {reason}")


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class VerificationError(InputforgeError):
    """Base for the transitive-closure checks run by ``verify``."""


class MissingDependenciesError(VerificationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Core dependencies missing in INPUT ({name})")


class ExtraneousDependenciesError(VerificationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Extraneous dependencies in INPUT ({name})")


class InvalidVersionError(VerificationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Dependency {name} using incorrect version")


class MultipleVersionsError(VerificationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Depending on multiple versions of {name}")


class MultipleEnvironmentsError(VerificationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Depending on multiple environments to build {name}")


class EnvironmentMismatchError(VerificationError):
    def __init__(self, name: str, environment: str) -> None:
        self.name = name
        self.environment = environment
        super().__init__(f"Environment mismatch for {name} - built in {environment}")


class NonGlobalDependenciesError(VerificationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Depending on a custom version of {name}")


class DependencyDepthError(VerificationError):
    def __init__(self, name: str, limit: int) -> None:
        self.name = name
        self.limit = limit
        super().__init__(
            f"Dependency tree under {name} exceeds {limit} levels (cyclic lockfile?)"
        )


# ---------------------------------------------------------------------------
# Remote and install
# ---------------------------------------------------------------------------


class ArtifactoryFailureError(InputforgeError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Artifactory - {detail}")


class InstallFailureError(InputforgeError):
    def __init__(self, failed: list[str] | None = None) -> None:
        self.failed = list(failed or [])
        suffix = f" ({', '.join(self.failed)})" if self.failed else ""
        super().__init__(f"Install failed{suffix}")
