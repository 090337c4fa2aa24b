"""inputforge: dependency acquisition for componentized builds.

A working directory's ``manifest.json`` pins its dependencies to published
integer versions. inputforge resolves them against an Artifactory remote,
keeps every tarball in an append-only local cache, unpacks them into
``INPUT/`` and verifies that the resulting lockfile tree uses a single
version and a single environment per component.
"""

__version__ = "0.1.0"
__description__ = "Fetch, stash and verify component dependencies"

from inputforge.core.installer import Installer
from inputforge.core.verifier import verify
from inputforge.cli.app import app as cli

__all__ = ["Installer", "verify", "cli", "__version__"]
