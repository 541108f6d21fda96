"""Command handlers — add, remove and import for any adapter.

Each handler pairs a filesystem change made by the engine with the matching
manifest update, so the CLI never needs per-kind code.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ais.adapters import Adapter
from ais.adapters.suffix import resolve_alias
from ais.config import GlobalConfigStore, RepoConfig, looks_like_url
from ais.console import console
from ais.errors import ConfigNotFoundError
from ais.project_config import (
    LOCAL_CONFIG_FILENAME,
    DependencyRemoval,
    config_filename,
    load_project_config,
)
from ais.sync.engine import import_entry
from ais.sync.models import ImportOptions, ImportResult, SyncOptions
from ais.utils.git_ops import ensure_local_clone
from ais.utils.ignore_file import add_ignore_entry

LOCAL_CONFIG_HEADER = "# Local AI Rules Sync Config"
MIGRATION_NOTICE = (
    'Detected legacy "cursor-rules*.json". Migrated to "ai-rules-sync*.json". '
    "Consider deleting the legacy files to avoid ambiguity."
)


@dataclass
class CommandContext:
    """Everything a handler needs besides the entry itself."""

    project_path: Path
    repo: RepoConfig
    is_local: bool = False


@dataclass
class AddResult:
    source_name: str
    target_name: str
    linked: bool
    migrated: bool


def resolve_target_repo(store: GlobalConfigStore, target: str | None = None) -> RepoConfig:
    """Pick the repository a command should use.

    *target* may be a configured repository name or a git URL; an unknown
    URL is registered and cloned. Without a target the current repository
    is used.

    Raises:
        ConfigNotFoundError: If nothing suitable is configured.
    """
    config = store.load()

    if target:
        if target in config.repos:
            return config.repos[target]
        if looks_like_url(target):
            repo = config.find_by_url(target)
            if repo is None:
                console.print("[blue]Detected URL for target. Configuring repository...[/]")
                repo = store.register_repo(target)
                ensure_local_clone(repo)
            return repo
        raise ConfigNotFoundError(f'Repository "{target}" not found in configuration.')

    if config.current is None:
        raise ConfigNotFoundError('No repository configured. Please run "ais use [url]" first.')
    return config.current


def _ignore_local_config(project_path: Path) -> None:
    if add_ignore_entry(project_path / ".gitignore", LOCAL_CONFIG_FILENAME, LOCAL_CONFIG_HEADER):
        console.print(f'[green]Added "{LOCAL_CONFIG_FILENAME}" to .gitignore.[/]')


def handle_add(
    adapter: Adapter, ctx: CommandContext, name: str, alias: str | None = None
) -> AddResult:
    """Link an entry and record it in the project manifest."""
    console.print(f"[dim]Using repository: [cyan]{ctx.repo.name}[/cyan] ({ctx.repo.url})[/]")

    result = adapter.link(
        SyncOptions(
            project_path=ctx.project_path,
            name=name,
            repo=ctx.repo,
            alias=alias,
            is_local=ctx.is_local,
        )
    )

    dep_alias = None if result.target_name == result.source_name else result.target_name
    migrated = adapter.add_dependency(
        ctx.project_path, result.source_name, ctx.repo.url, dep_alias, ctx.is_local
    )
    console.print(f"[green]Updated {config_filename(ctx.is_local)} dependency.[/]")

    if migrated:
        console.print(f"[yellow]{MIGRATION_NOTICE}[/]")
    if ctx.is_local:
        _ignore_local_config(ctx.project_path)

    return AddResult(
        source_name=result.source_name,
        target_name=result.target_name,
        linked=result.linked,
        migrated=migrated,
    )


def handle_remove(adapter: Adapter, project_path: Path, alias: str) -> DependencyRemoval:
    """Unlink an entry and drop it from both manifests.

    For file-mode kinds a bare alias (``foo``) is matched against recorded
    names (``foo.instructions.md``).
    """
    keys = list(load_project_config(project_path).entries(adapter.config_path))
    alias = resolve_alias(alias, keys, adapter.file_suffixes)

    adapter.unlink(project_path, alias)
    removal = adapter.remove_dependency(project_path, alias)

    if removal.removed_from:
        console.print(
            f'[green]Removed "{alias}" from configuration: {", ".join(removal.removed_from)}[/]'
        )
    else:
        console.print(f'[yellow]"{alias}" was not found in any configuration file.[/]')
    if removal.migrated:
        console.print(f"[yellow]{MIGRATION_NOTICE}[/]")

    return removal


def handle_import(
    adapter: Adapter,
    ctx: CommandContext,
    name: str,
    message: str | None = None,
    force: bool = False,
    push: bool = False,
) -> ImportResult:
    """Move a project entry into the repository, link it back and record it."""
    console.print(f"[dim]Using repository: [cyan]{ctx.repo.name}[/cyan] ({ctx.repo.url})[/]")

    result = import_entry(
        adapter,
        ImportOptions(
            project_path=ctx.project_path,
            name=name,
            repo=ctx.repo,
            is_local=ctx.is_local,
            force=force,
            push=push,
            commit_message=message,
        ),
    )

    adapter.add_dependency(ctx.project_path, result.source_name, ctx.repo.url, None, ctx.is_local)
    console.print(f"[green]Updated {config_filename(ctx.is_local)} dependency.[/]")
    if ctx.is_local:
        _ignore_local_config(ctx.project_path)

    console.print(f'\n[bold green]Successfully imported "{name}"![/]')
    return result
