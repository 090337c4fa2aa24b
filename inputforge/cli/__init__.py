"""inputforge CLI — Typer-based command-line interface.

Provides the ``inputforge`` command with subcommands for configuring the
tool, creating manifests, fetching and updating dependencies, stashing
local builds and verifying INPUT.

All output uses Rich for formatted terminal display.
"""
