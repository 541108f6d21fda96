"""Install — recreate every link recorded in a project's manifests.

Manifests are only read here. Repositories referenced by URL but not yet
configured are registered and cloned on the fly.
"""

from __future__ import annotations

from pathlib import Path

from ais.adapters import Adapter, AdapterRegistry
from ais.config import GlobalConfigStore, RepoConfig
from ais.console import console
from ais.project_config import get_local_entries, load_project_config
from ais.sync.models import LinkResult, SyncOptions
from ais.utils.git_ops import ensure_local_clone


def find_or_create_repo(store: GlobalConfigStore, repo_url: str, entry_name: str) -> RepoConfig:
    """Return the configured repository for *repo_url*, cloning it if needed."""
    repo = store.load().find_by_url(repo_url)
    if repo is not None:
        if not Path(repo.path).exists():
            ensure_local_clone(repo)
        return repo

    console.print(f"[yellow]Repository for {entry_name} not found locally. Configuring...[/]")
    repo = store.register_repo(repo_url)
    ensure_local_clone(repo)
    return repo


def install_entries_for_adapter(
    adapter: Adapter, project_path: str | Path, store: GlobalConfigStore
) -> list[LinkResult]:
    """Link every manifest entry of one adapter, in manifest order.

    Entries skipped because a real file occupies the target do not stop
    the loop; any other error propagates.
    """
    project = Path(project_path)
    dependencies = load_project_config(project).dependencies(adapter.config_path)

    if not dependencies:
        console.print(f"[yellow]No {adapter.tool} {adapter.subtype} found in ai-rules-sync*.json.[/]")
        return []

    local_entries = get_local_entries(project, adapter.config_path)
    results = []

    for dep in dependencies:
        console.print(
            f'[blue]Installing {adapter.tool} {adapter.subtype} "{dep.name}" '
            f'(as "{dep.alias}") from {dep.url}...[/]'
        )
        repo = find_or_create_repo(store, dep.url, dep.name)
        results.append(
            adapter.link(
                SyncOptions(
                    project_path=project,
                    name=dep.name,
                    repo=repo,
                    alias=dep.alias if dep.is_aliased else None,
                    is_local=dep.alias in local_entries,
                )
            )
        )

    skipped = sum(1 for r in results if not r.linked)
    if skipped:
        console.print(
            f"[yellow]Installed {len(results) - skipped} of {len(results)} "
            f"{adapter.tool} {adapter.subtype}; {skipped} skipped.[/]"
        )
    else:
        console.print(f"[green]All {adapter.tool} {adapter.subtype} installed successfully.[/]")
    return results


def install_all(
    registry: AdapterRegistry,
    project_path: str | Path,
    store: GlobalConfigStore,
    tool: str | None = None,
) -> dict[str, list[LinkResult]]:
    """Install every adapter (optionally of one tool) that has manifest entries."""
    config = load_project_config(project_path)
    adapters = registry.for_tool(tool) if tool else registry.all()
    results: dict[str, list[LinkResult]] = {}

    for adapter in adapters:
        if not config.entries(adapter.config_path):
            continue
        results[adapter.name] = install_entries_for_adapter(adapter, project_path, store)

    if not results:
        console.print("[yellow]No entries found in ai-rules-sync*.json.[/]")
    return results
