"""CLI entry point for extension-registry.

Invoked as::

    extreg [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m extreg.cli.main

Commands
--------
validate    Validate extensions.toml, .gitmodules and the links between them
manifest    Validate a manifest.json produced by the packaging tool
sort        Rewrite extensions.toml and .gitmodules in canonical order
select      Print the extension ids that need packaging
version     Show version information

Settings come from the environment (see ``extreg.config``) and are read
exactly once, when the command group starts.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from extreg.config import PublishConfig

if TYPE_CHECKING:
    from extreg.diagnostics import Diagnostic, ValidationResult
    from extreg.model.nodes import Registry

console = Console()
err_console = Console(stderr=True)


def _read_source(path: str | Path) -> str:
    """Read a source file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {escape(str(exc))}")
        sys.exit(1)


def _parse_registry_or_exit(source: str, path: str | Path) -> "Registry":
    """Parse registry text, printing the schema error and exiting on failure."""
    from extreg.errors import SchemaError
    from extreg.validator import parse_registry

    try:
        return parse_registry(source, str(path))
    except SchemaError as exc:
        err_console.print(f"[red]Invalid registry[/red] {path}:")
        for error in exc.errors:
            err_console.print(f"  {escape(error)}")
        sys.exit(1)


def _severity_color(severity_name: str) -> str:
    """Map a DiagnosticSeverity name to a Rich color string."""
    colors = {
        "ERROR": "red",
        "WARNING": "yellow",
    }
    return colors.get(severity_name, "white")


def _print_diagnostics(title: str, diagnostics: Sequence["Diagnostic"]) -> None:
    table = Table(title=title, show_lines=True)
    table.add_column("Severity", style="bold", min_width=10)
    table.add_column("Code", min_width=8)
    table.add_column("Line", min_width=6)
    table.add_column("Message")

    for d in diagnostics:
        color = _severity_color(d.severity.name)
        hint = f"\n[dim]hint: {escape(d.suggestion)}[/dim]" if d.suggestion else ""
        table.add_row(
            f"[{color}]{d.severity.name}[/{color}]",
            d.code,
            str(d.line) if d.line is not None else "-",
            escape(d.message) + hint,
        )
    console.print(table)


def _check_extension_tomls(registry: "Registry", root: Path) -> "ValidationResult":
    """Cross-check registry ids against each checked-out ``extension.toml``.

    Entries whose extension directory is not checked out under ``root``
    are skipped.
    """
    from extreg.consistency import check_extension_toml_id
    from extreg.diagnostics import ValidationResult
    from extreg.errors import SchemaError
    from extreg.model.serializer import loads_toml

    result = ValidationResult()
    for entry in registry:
        extension_toml = root / entry.extension_path / "extension.toml"
        if not extension_toml.is_file():
            continue
        try:
            data = loads_toml(_read_source(extension_toml), str(extension_toml))
        except SchemaError as exc:
            err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
            sys.exit(1)
        result = result.merge(check_extension_toml_id(entry, data))
    return result


def _config(ctx: click.Context) -> PublishConfig:
    return ctx.find_object(PublishConfig) or PublishConfig.from_env(os.environ)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="extension-registry")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Validate and canonicalize the extension registry, and select what to package."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = PublishConfig.from_env(os.environ)


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from extreg import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]extension-registry[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# validate command
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.option("--registry", "registry_path", default=None, help="Path to extensions.toml")
@click.option("--gitmodules", "gitmodules_path", default=None, help="Path to .gitmodules")
@click.option(
    "--allow-ssh",
    is_flag=True,
    default=False,
    help="Accept git@ and ssh:// submodule urls in addition to https://",
)
@click.pass_context
def validate_command(
    ctx: click.Context,
    registry_path: str | None,
    gitmodules_path: str | None,
    allow_ssh: bool,
) -> None:
    """Validate extensions.toml, .gitmodules and the links between them.

    Checked-out extensions also have their extension.toml id compared
    with the registry id.
    """
    from extreg.consistency import check_registry_submodules
    from extreg.diagnostics import ValidationResult
    from extreg.errors import SchemaError
    from extreg.model.nodes import Registry
    from extreg.model.serializer import loads_toml
    from extreg.validator import UrlPolicy, validate_gitmodules, validate_registry

    config = _config(ctx)
    registry_file = Path(registry_path) if registry_path else config.registry_path
    gitmodules_file = Path(gitmodules_path) if gitmodules_path else config.gitmodules_path
    policy = UrlPolicy.PERMISSIVE if allow_ssh else config.url_policy

    try:
        data = loads_toml(_read_source(registry_file), registry_file.name)
    except SchemaError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    registry_result = validate_registry(data)
    gitmodules_result = validate_gitmodules(_read_source(gitmodules_file), policy)

    result: ValidationResult = registry_result.merge(gitmodules_result)
    if registry_result.is_valid:
        registry = Registry.from_mapping(data)
        result = result.merge(
            check_registry_submodules(registry, gitmodules_result.submodules)
        ).merge(_check_extension_tomls(registry, registry_file.parent))

    if not result.diagnostics:
        console.print(
            f"[green]OK[/green] {registry_file}, {gitmodules_file}: no issues found"
        )
        sys.exit(0)

    _print_diagnostics(f"Validation: {registry_file}, {gitmodules_file}", result.diagnostics)
    console.print(
        f"\n[bold]Summary:[/bold] {len(result.errors)} error(s), "
        f"{len(result.warnings)} warning(s)"
    )

    if not result.is_valid:
        sys.exit(1)


# ---------------------------------------------------------------------------
# manifest command
# ---------------------------------------------------------------------------


@cli.command(name="manifest")
@click.argument("file", type=click.Path(exists=False))
@click.option("--entry-id", default=None, help="Registry id to cross-check the version against")
@click.option("--registry", "registry_path", default=None, help="Path to extensions.toml")
@click.pass_context
def manifest_command(
    ctx: click.Context, file: str, entry_id: str | None, registry_path: str | None
) -> None:
    """Validate a manifest.json produced by the packaging tool.

    FILE is the path to the manifest to validate.
    """
    from extreg.consistency import check_manifest_matches_entry
    from extreg.model.nodes import Manifest
    from extreg.validator import validate_manifest

    try:
        data = json.loads(_read_source(file))
    except json.JSONDecodeError as exc:
        err_console.print(f"[red]Error:[/red] {file} is not valid JSON: {escape(str(exc))}")
        sys.exit(1)

    result = validate_manifest(data)

    if result.is_valid and entry_id is not None:
        config = _config(ctx)
        registry_file = Path(registry_path) if registry_path else config.registry_path
        registry = _parse_registry_or_exit(_read_source(registry_file), registry_file)
        entry = registry.get(entry_id)
        if entry is None:
            err_console.print(f"[red]Error:[/red] No such extension: {entry_id}")
            sys.exit(1)
        result = result.merge(check_manifest_matches_entry(entry, Manifest.from_dict(data)))

    if not result.diagnostics:
        console.print(f"[green]OK[/green] {file}: no issues found")
        sys.exit(0)

    _print_diagnostics(f"Manifest: {file}", result.diagnostics)
    if not result.is_valid:
        sys.exit(1)


# ---------------------------------------------------------------------------
# sort command
# ---------------------------------------------------------------------------


@cli.command(name="sort")
@click.option("--check", is_flag=True, default=False, help="Only check whether files are sorted")
@click.pass_context
def sort_command(ctx: click.Context, check: bool) -> None:
    """Rewrite extensions.toml and .gitmodules in canonical order."""
    from extreg.errors import SchemaError
    from extreg.formatter import (
        canonical_gitmodules_text,
        canonical_registry_text,
        sort_gitmodules,
        sort_registry,
    )

    config = _config(ctx)
    unsorted: list[Path] = []

    try:
        if check:
            registry_text = _read_source(config.registry_path)
            if canonical_registry_text(registry_text, config.registry_path.name) != registry_text:
                unsorted.append(config.registry_path)
            gitmodules_text = _read_source(config.gitmodules_path)
            if canonical_gitmodules_text(gitmodules_text, config.url_policy) != gitmodules_text:
                unsorted.append(config.gitmodules_path)
        else:
            if sort_registry(config.registry_path):
                unsorted.append(config.registry_path)
            if sort_gitmodules(config.gitmodules_path, config.url_policy):
                unsorted.append(config.gitmodules_path)
    except SchemaError as exc:
        err_console.print("[red]Cannot sort invalid file:[/red]")
        for error in exc.errors:
            err_console.print(f"  {escape(error)}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if not unsorted:
        console.print("[green]OK[/green] already in canonical order")
        return

    for path in unsorted:
        if check:
            console.print(f"[yellow]NEEDS SORTING[/yellow] {path}")
        else:
            console.print(f"[green]Sorted[/green] {path}")
    if check:
        sys.exit(1)


# ---------------------------------------------------------------------------
# select command
# ---------------------------------------------------------------------------


@cli.command(name="select")
@click.option(
    "--mode",
    type=click.Choice(["publish", "changed"], case_sensitive=False),
    default=None,
    help="Selection policy (default: publish if SHOULD_PUBLISH=true, else changed)",
)
@click.option(
    "--published",
    "published_path",
    default=None,
    help="YAML/JSON mapping of extension id to published versions",
)
@click.option(
    "--published-keys",
    "published_keys_path",
    default=None,
    help="Blob-store key listing, one key per line",
)
@click.option(
    "--reference",
    "reference_path",
    default=None,
    help="extensions.toml at the reference revision",
)
@click.option("--only", default=None, help="Restrict the selection to one extension id")
@click.pass_context
def select_command(
    ctx: click.Context,
    mode: str | None,
    published_path: str | None,
    published_keys_path: str | None,
    reference_path: str | None,
    only: str | None,
) -> None:
    """Print the extension ids that need packaging, one per line."""
    from extreg.errors import SchemaError, SelectionError
    from extreg.model.nodes import PublishedIndex
    from extreg.model.serializer import loads_published_index
    from extreg.selection import SelectionMode, published_index_from_keys, select_extension_ids

    config = _config(ctx)
    selection_mode = SelectionMode(mode.lower()) if mode else config.selection_mode
    registry = _parse_registry_or_exit(_read_source(config.registry_path), config.registry_path)

    published: PublishedIndex | None = None
    if published_path:
        try:
            published = loads_published_index(_read_source(published_path))
        except SchemaError as exc:
            err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
            sys.exit(1)
    elif published_keys_path:
        keys = _read_source(published_keys_path).split()
        published = published_index_from_keys(keys, config.prefix)

    reference = None
    if reference_path:
        reference = _parse_registry_or_exit(_read_source(reference_path), reference_path)

    try:
        selected = select_extension_ids(
            registry,
            selection_mode,
            published=published,
            reference=reference,
            only=only,
        )
    except SelectionError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    entries = {entry.id: entry for entry in registry}
    for extension_id in selected:
        entry = entries[extension_id]
        click.echo(f"{extension_id}\t{entry.version}\t{entry.extension_path}")


if __name__ == "__main__":
    cli()
