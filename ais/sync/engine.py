"""Sync engine — link, unlink and import single entries for any adapter.

Every entry kind goes through the same steps: resolve the source inside the
repository clone, resolve the target name inside the project, converge the
symlink, then record the link path in an ignore file. Adapters only change
how the source and target names are resolved.

A real file or directory at a target path is never overwritten or deleted;
the entry is skipped with a warning so that batch installs keep going.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ais.console import console
from ais.errors import AlreadyExistsError, AlreadyManagedError, EntryNotFoundError
from ais.project_config import (
    CONFIG_FILENAME,
    load_repo_source_config,
    migrate_repo_source_config,
)
from ais.sync.models import ImportOptions, ImportResult, LinkResult, SyncOptions
from ais.utils.git_ops import commit_paths
from ais.utils.ignore_file import add_ignore_entry, remove_ignore_entry

if TYPE_CHECKING:
    from ais.adapters.base import Adapter

logger = logging.getLogger(__name__)

IGNORE_HEADER = "# AI Rules Sync"
GITIGNORE = ".gitignore"
GIT_INFO_EXCLUDE = ".git/info/exclude"


def source_dir_for(adapter: Adapter, repo_dir: Path) -> str:
    """Effective source directory of *adapter* inside a repository clone."""
    return load_repo_source_config(repo_dir).source_dir_for(
        adapter.tool, adapter.subtype, adapter.default_source_dir
    )


def link_entry(adapter: Adapter, options: SyncOptions) -> LinkResult:
    """Link one entry from the source repository into the project.

    Raises:
        EntryNotFoundError: If the source entry does not exist.
        AmbiguousSuffixError: If a bare file-mode name matches several files.
    """
    repo_dir = Path(options.repo.path)
    source_dir = source_dir_for(adapter, repo_dir)

    if adapter.resolve_source is not None:
        resolved = adapter.resolve_source(repo_dir, source_dir, options.name)
        source_name, source_path, suffix = (
            resolved.source_name,
            resolved.source_path,
            resolved.suffix,
        )
    else:
        source_name, suffix = options.name, None
        source_path = repo_dir / source_dir / options.name
        if not source_path.exists():
            raise EntryNotFoundError(
                f'{adapter.entity_name.capitalize()} "{options.name}" not found in repository.'
            )

    if adapter.resolve_target_name is not None:
        target_name = adapter.resolve_target_name(options.name, options.alias, suffix)
    else:
        target_name = options.alias or options.name

    project = Path(options.project_path).resolve()
    target_path = project / adapter.target_dir / target_name
    target_path.parent.mkdir(parents=True, exist_ok=True)

    if target_path.is_symlink():
        console.print(f'[yellow]Entry "{target_name}" already linked. Re-linking...[/]')
        target_path.unlink()
    elif target_path.exists():
        console.print(
            f'[yellow]Warning: "{target_path}" exists and is not a symlink. '
            "Skipping to avoid data loss.[/]"
        )
        return LinkResult(source_name=source_name, target_name=target_name, linked=False)

    source_path = Path(source_path).resolve()
    target_path.symlink_to(source_path, target_is_directory=source_path.is_dir())
    logger.debug("symlink %s -> %s", target_path, source_path)
    console.print(f'[green]Linked "{source_name}" to project as "{target_name}".[/]')

    _add_to_ignore(project, f"{adapter.target_dir}/{target_name}", options.is_local)

    return LinkResult(source_name=source_name, target_name=target_name, linked=True)


def unlink_entry(adapter: Adapter, project_path: str | Path, alias: str) -> bool:
    """Remove the link for *alias* and its ignore lines.

    Returns:
        True if a symlink was removed.
    """
    project = Path(project_path).resolve()
    target_path = project / adapter.target_dir / alias
    removed = False

    if target_path.is_symlink():
        target_path.unlink()
        removed = True
        console.print(f'[green]Removed "{alias}" from project.[/]')
    elif target_path.exists():
        console.print(
            f'[yellow]Warning: "{target_path}" is not a symlink. Leaving it in place.[/]'
        )
    else:
        console.print(f'[yellow]Entry "{alias}" not found in project.[/]')

    entry = f"{adapter.target_dir}/{alias}"
    for ignore_file in (GITIGNORE, GIT_INFO_EXCLUDE):
        if remove_ignore_entry(project / ignore_file, entry):
            console.print(f'[green]Removed "{entry}" from {ignore_file}.[/]')

    return removed


def _add_to_ignore(project: Path, entry: str, is_local: bool) -> None:
    """Ignore *entry* in .gitignore, or in .git/info/exclude for private entries."""
    if is_local:
        exclude = project / GIT_INFO_EXCLUDE
        if not exclude.parent.is_dir():
            console.print(
                "[yellow]Warning: Could not find .git/info/exclude. "
                "Skipping automatic ignore for private entry.[/]"
            )
            console.print(f'[yellow]Please manually add "{entry}" to your private ignore file.[/]')
            return
        ignore_path, label = exclude, GIT_INFO_EXCLUDE
    else:
        ignore_path, label = project / GITIGNORE, GITIGNORE

    if add_ignore_entry(ignore_path, entry, IGNORE_HEADER):
        console.print(f'[green]Added "{entry}" to {label}.[/]')
    else:
        console.print(f'[dim]"{entry}" already in {label}.[/]')


def import_entry(adapter: Adapter, options: ImportOptions) -> ImportResult:
    """Move a project entry into the source repository and link it back.

    The project entry and the destination are validated before anything is
    touched. If the commit fails, the copy stays uncommitted in the
    repository and the project original is still in place.

    Raises:
        EntryNotFoundError: If the entry does not exist in the project.
        AlreadyManagedError: If the entry is already a symlink.
        AlreadyExistsError: If the destination exists and ``force`` is off.
    """
    project = Path(options.project_path).resolve()
    target_path = project / adapter.target_dir / options.name

    if target_path.is_symlink():
        raise AlreadyManagedError(
            f'Entry "{options.name}" is already a symlink (already managed by ai-rules-sync)'
        )
    if not target_path.exists():
        raise EntryNotFoundError(f'Entry "{options.name}" not found in project at {target_path}')

    repo_dir = Path(options.repo.path)
    dest_path = repo_dir / source_dir_for(adapter, repo_dir) / options.name

    if dest_path.exists() or dest_path.is_symlink():
        if not options.force:
            raise AlreadyExistsError(
                f'Entry "{options.name}" already exists in rules repository at {dest_path}. '
                "Use --force to overwrite."
            )
        console.print(
            f'[yellow]Entry "{options.name}" already exists in repository. '
            "Overwriting (--force)...[/]"
        )
        _remove_path(dest_path)

    dest_path.parent.mkdir(parents=True, exist_ok=True)
    if target_path.is_dir():
        shutil.copytree(target_path, dest_path, symlinks=True)
    else:
        shutil.copy2(target_path, dest_path)
    console.print(f'[green]Copied "{options.name}" to rules repository.[/]')

    to_stage = [dest_path.relative_to(repo_dir)]
    if migrate_repo_source_config(repo_dir):
        console.print(f"[yellow]Rewrote {CONFIG_FILENAME} in the rules repository to the sourceDir layout.[/]")
        to_stage.append(Path(CONFIG_FILENAME))

    message = options.commit_message or f"Import {adapter.tool} {adapter.subtype}: {options.name}"
    sha = commit_paths(repo_dir, to_stage, message, push=options.push)
    console.print("[green]Committed to rules repository.[/]")

    _remove_path(target_path)
    console.print("[green]Removed original from project.[/]")

    result = link_entry(adapter, options)
    return ImportResult(
        source_name=result.source_name,
        target_name=result.target_name,
        commit_sha=sha,
        linked=result.linked,
    )


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
