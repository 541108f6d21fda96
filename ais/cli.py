"""ais CLI — the main entry point for ai-rules-sync."""

from __future__ import annotations

import subprocess
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import click
from git import GitCommandError
from rich.table import Table

from ais import __version__
from ais.adapters import Adapter, get_default_adapter, infer_default_tool, registry
from ais.config import GlobalConfigStore, looks_like_url
from ais.console import configure_logging, console, err_console
from ais.errors import AmbiguousAliasError, ConfigNotFoundError, SyncError
from ais.project_config import load_project_config
from ais.sync.handlers import (
    CommandContext,
    handle_add,
    handle_import,
    handle_remove,
    resolve_target_repo,
)
from ais.sync.install import install_all, install_entries_for_adapter
from ais.utils.git_ops import ensure_local_clone, run_git_command

_HANDLED_ERRORS = (SyncError, OSError, GitCommandError, subprocess.CalledProcessError)


@dataclass
class CliState:
    store: GlobalConfigStore
    target: str | None = None


@contextmanager
def _errors_reported(action: str):
    """Print handled errors on stderr and exit with status 1."""
    try:
        yield
    except _HANDLED_ERRORS as e:
        err_console.print(f"[red]Error {action}:[/] {e}")
        sys.exit(1)


def _context(state: CliState, local: bool) -> CommandContext:
    return CommandContext(
        project_path=Path.cwd(),
        repo=resolve_target_repo(state.store, state.target),
        is_local=local,
    )


@click.group()
@click.version_option(version=__version__)
@click.option("--target", "-t", default=None, help="Rules repository name or URL to use")
@click.option(
    "--config-dir",
    envvar="AIS_CONFIG_DIR",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="User config directory (default: ~/.ai-rules-sync)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def main(ctx: click.Context, target: str | None, config_dir: Path | None, verbose: bool):
    """ais — AI Rules Sync.

    Link rules, commands, skills, instructions and agents from a git
    repository into the current project as symlinks, tracked in
    ai-rules-sync.json.
    """
    configure_logging(verbose)
    ctx.obj = CliState(store=GlobalConfigStore(config_dir), target=target)


# ── Repositories ─────────────────────────────────────────────────────


@main.command()
@click.argument("url_or_name", required=False)
@click.pass_obj
def use(state: CliState, url_or_name: str | None):
    """Select the rules repository, by configured name or git URL."""
    with _errors_reported("configuring repository"):
        config = state.store.load()

        if not url_or_name:
            if config.current is None:
                raise ConfigNotFoundError("Please provide a git repository URL or name.")
            console.print(f"[blue]Current repository: {config.current.name} ({config.current.url})[/]")
            return

        if url_or_name in config.repos:
            repo = state.store.set_current(url_or_name)
            console.print(f"[green]Switched to repository: {repo.name}[/]")
        elif looks_like_url(url_or_name):
            repo = state.store.register_repo(url_or_name, make_current=True)
            console.print(f"[green]Configured repository: {repo.name} ({repo.url})[/]")
        else:
            raise ConfigNotFoundError(
                f'Repository "{url_or_name}" not found in configuration. '
                'Use "ais use <url>" to add a new repository.'
            )

        ensure_local_clone(repo)
        console.print("[green]Repository ready.[/]")


@main.command(name="list")
@click.pass_obj
def list_repos(state: CliState):
    """List configured rules repositories."""
    config = state.store.load()

    if not config.repos:
        console.print('[yellow]No repositories configured. Use "ais use [url]" to configure.[/]')
        return

    table = Table(title=f"Repositories ({len(config.repos)})")
    table.add_column("", width=1)
    table.add_column("Name", style="cyan")
    table.add_column("URL", style="dim")
    table.add_column("Local path")

    for name, repo in config.repos.items():
        current = "[green]*[/]" if name == config.current_repo else ""
        table.add_row(current, name, repo.url, str(repo.path))

    console.print(table)


def _split_target(args: tuple[str, ...]) -> tuple[list[str], str | None]:
    """Pull ``-t/--target <repo>`` out of passthrough git arguments."""
    git_args: list[str] = []
    target = None
    it = iter(args)
    for arg in it:
        if arg in ("-t", "--target"):
            target = next(it, None)
        else:
            git_args.append(arg)
    return git_args, target


@main.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
@click.argument("git_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def git(state: CliState, git_args: tuple[str, ...]):
    """Run a git command inside the rules repository."""
    args, target = _split_target(git_args)
    with _errors_reported("executing git command"):
        repo = resolve_target_repo(state.store, target or state.target)
        run_git_command(args, repo.path)


# ── Entries (tool inferred from the project) ─────────────────────────


def _inferred_adapter() -> Adapter:
    return get_default_adapter(infer_default_tool(load_project_config(Path.cwd())))


@main.command()
@click.argument("name")
@click.argument("alias", required=False)
@click.option("--local", "-l", is_flag=True, help="Add to ai-rules-sync.local.json (private)")
@click.pass_obj
def add(state: CliState, name: str, alias: str | None, local: bool):
    """Link an entry into the project (tool inferred from the project config)."""
    with _errors_reported("adding entry"):
        handle_add(_inferred_adapter(), _context(state, local), name, alias)


@main.command()
@click.argument("alias")
def remove(alias: str):
    """Remove an entry from the project, wherever it is configured."""
    with _errors_reported("removing entry"):
        project = Path.cwd()
        owners = registry.find_by_alias(load_project_config(project), alias)
        if len(owners) > 1:
            names = ", ".join(a.name for a in owners)
            raise AmbiguousAliasError(
                f'"{alias}" is configured for several kinds ({names}). '
                'Use "ais <tool> <subtype> remove" explicitly.'
            )
        adapter = owners[0] if owners else _inferred_adapter()
        handle_remove(adapter, project, alias)


@main.command()
@click.pass_obj
def install(state: CliState):
    """Link every entry recorded in ai-rules-sync*.json."""
    with _errors_reported("installing entries"):
        install_all(registry, Path.cwd(), state.store)


@main.command(name="import")
@click.argument("name")
@click.option("--local", "-l", is_flag=True, help="Add to ai-rules-sync.local.json (private)")
@click.option("--message", "-m", default=None, help="Custom git commit message")
@click.option("--force", "-f", is_flag=True, help="Overwrite if entry already exists in repository")
@click.option("--push", "-p", is_flag=True, help="Push to remote repository after commit")
@click.pass_obj
def import_(state: CliState, name: str, local: bool, message: str | None, force: bool, push: bool):
    """Move a project entry into the rules repository and link it back."""
    with _errors_reported("importing entry"):
        handle_import(_inferred_adapter(), _context(state, local), name, message, force, push)


# ── Per-tool commands ────────────────────────────────────────────────


def _register_adapter_commands(group: click.Group, adapter: Adapter, install_tool: bool) -> None:
    """Attach add/remove/install/import for *adapter* to *group*."""
    what = f"{adapter.tool} {adapter.entity_name}"

    @group.command(name="add", help=f"Sync a {what} to the project.")
    @click.argument("name")
    @click.argument("alias", required=False)
    @click.option("--local", "-l", is_flag=True, help="Add to ai-rules-sync.local.json (private)")
    @click.pass_obj
    def add_cmd(state: CliState, name: str, alias: str | None, local: bool):
        with _errors_reported(f"adding {what}"):
            handle_add(adapter, _context(state, local), name, alias)

    @group.command(name="remove", help=f"Remove a {what} from the project.")
    @click.argument("alias")
    def remove_cmd(alias: str):
        with _errors_reported(f"removing {what}"):
            handle_remove(adapter, Path.cwd(), alias)

    @group.command(name="install", help=f"Install all {adapter.tool} entries from config.")
    @click.pass_obj
    def install_cmd(state: CliState):
        with _errors_reported(f"installing {adapter.tool} {adapter.subtype}"):
            if install_tool:
                install_all(registry, Path.cwd(), state.store, tool=adapter.tool)
            else:
                install_entries_for_adapter(adapter, Path.cwd(), state.store)

    @group.command(name="import", help=f"Import a {what} from the project into the repository.")
    @click.argument("name")
    @click.option("--local", "-l", is_flag=True, help="Add to ai-rules-sync.local.json (private)")
    @click.option("--message", "-m", default=None, help="Custom git commit message")
    @click.option("--force", "-f", is_flag=True, help="Overwrite if entry already exists in repository")
    @click.option("--push", "-p", is_flag=True, help="Push to remote repository after commit")
    @click.pass_obj
    def import_cmd(state: CliState, name: str, local: bool, message: str | None, force: bool, push: bool):
        with _errors_reported(f"importing {what}"):
            handle_import(adapter, _context(state, local), name, message, force, push)


def _register_tool_groups(root: click.Group) -> None:
    """``ais <tool> add ...`` uses the tool's default kind; ``ais <tool> <subtype> add ...`` any kind."""
    for tool in registry.tools():
        tool_group = click.Group(name=tool, help=f"Manage {tool} entries.")
        _register_adapter_commands(tool_group, get_default_adapter(tool), install_tool=True)

        for adapter in registry.for_tool(tool):
            sub = click.Group(name=adapter.subtype, help=f"Manage {tool} {adapter.subtype}.")
            _register_adapter_commands(sub, adapter, install_tool=False)
            tool_group.add_command(sub)

        root.add_command(tool_group)


_register_tool_groups(main)


if __name__ == "__main__":
    main()
