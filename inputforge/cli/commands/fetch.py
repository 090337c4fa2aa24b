"""``inputforge fetch``, ``update``, ``update-all``, ``remove`` and ``export``."""

from __future__ import annotations

from pathlib import Path

import typer

from inputforge.cli.context import console, fail, load_settings, open_installer
from inputforge.errors import InputforgeError

_ENV_OPTION = typer.Option("global", "--env", "-e", help="Environment to fetch for.")


def fetch_cmd(
    core: bool = typer.Option(
        False, "--core", "-c", help="Only fetch dependencies, not devDependencies."
    ),
    env: str = _ENV_OPTION,
) -> None:
    """Fetch every dependency in the manifest into INPUT."""
    settings = load_settings()
    try:
        with open_installer(settings) as installer:
            installed = installer.fetch_all(core_only=core, environment=env)
    except InputforgeError as exc:
        fail(exc)
    console.print(f"[bold green]Fetched[/bold green] {len(installed)} component(s) for {env}")


def update_cmd(
    components: list[str] = typer.Argument(..., help="name, name=VERSION or name=STASH"),
    save: bool = typer.Option(False, "--save", "-S", help="Save versions to dependencies."),
    save_dev: bool = typer.Option(
        False, "--save-dev", "-D", help="Save versions to devDependencies."
    ),
    env: str = _ENV_OPTION,
) -> None:
    """Install specific components, latest unless a version is given."""
    if save and save_dev:
        fail(ValueError("--save and --save-dev are mutually exclusive"))
    settings = load_settings()
    try:
        with open_installer(settings) as installer:
            updated = installer.update(components, save=save, save_dev=save_dev, environment=env)
    except (InputforgeError, ValueError) as exc:
        fail(exc)
    for c in updated:
        console.print(f"[green]Updated[/green] {c.name} to {c.version} ({c.environment})")


def update_all_cmd(
    save: bool = typer.Option(False, "--save", "-S", help="Save the new versions."),
    dev: bool = typer.Option(False, "--dev", "-D", help="Update devDependencies instead."),
    env: str = _ENV_OPTION,
) -> None:
    """Update every dependency (or devDependency) to its latest version."""
    settings = load_settings()
    try:
        with open_installer(settings) as installer:
            updated = installer.update_all(save=save, dev=dev, environment=env)
    except InputforgeError as exc:
        fail(exc)
    for c in updated:
        console.print(f"[green]Updated[/green] {c.name} to {c.version} ({c.environment})")


def remove_cmd(
    components: list[str] = typer.Argument(..., help="Components to remove."),
    save: bool = typer.Option(False, "--save", "-S", help="Remove from dependencies."),
    save_dev: bool = typer.Option(
        False, "--save-dev", "-D", help="Remove from devDependencies."
    ),
) -> None:
    """Remove components from INPUT and optionally from the manifest."""
    if save and save_dev:
        fail(ValueError("--save and --save-dev are mutually exclusive"))
    settings = load_settings()
    try:
        with open_installer(settings) as installer:
            installer.remove(components, save=save, save_dev=save_dev)
    except InputforgeError as exc:
        fail(exc)


def export_cmd(
    component: str = typer.Argument(..., help="name, name=VERSION or name=STASH"),
    output: Path = typer.Option(Path("."), "--output", "-o", help="Directory to export to."),
    env: str = _ENV_OPTION,
) -> None:
    """Copy a component's tarball out of the cache."""
    settings = load_settings()
    try:
        with open_installer(settings) as installer:
            dest = installer.export(component, output, env)
    except (InputforgeError, ValueError) as exc:
        fail(exc)
    console.print(f"[bold green]Exported[/bold green] {dest}")
