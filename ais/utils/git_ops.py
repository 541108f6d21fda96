"""Git operations — clone/update source repositories, run git, commit imports."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from git import InvalidGitRepositoryError, Repo

from ais.config import RepoConfig
from ais.console import console

logger = logging.getLogger(__name__)


def ensure_local_clone(repo: RepoConfig) -> Path:
    """Make sure ``repo.path`` holds an up-to-date clone of ``repo.url``.

    An existing clone is pulled; a directory that is not a git repository is
    replaced by a fresh clone.

    Returns:
        The local clone path.
    """
    path = Path(repo.path)

    if path.exists():
        try:
            local = Repo(path)
        except InvalidGitRepositoryError:
            logger.debug("%s is not a git repository, re-cloning", path)
            shutil.rmtree(path)
            _clone_repo(repo.url, path)
            return path

        console.print(f"[blue]Updating rules repository ({repo.name})...[/]")
        if local.remotes:
            local.remotes[0].pull()
        return path

    _clone_repo(repo.url, path)
    return path


def _clone_repo(url: str, path: Path) -> None:
    """Clone a Git repo into *path*."""
    console.print(f"[blue]Cloning {url}...[/]")
    path.parent.mkdir(parents=True, exist_ok=True)
    Repo.clone_from(url, path)


def run_git_command(args: list[str], repo_path: str | Path) -> None:
    """Run ``git <args>`` inside the repository, inheriting stdio.

    Raises:
        FileNotFoundError: If the repository clone does not exist.
        subprocess.CalledProcessError: If git exits non-zero.
    """
    path = Path(repo_path)
    if not path.exists():
        raise FileNotFoundError(f"Rules repository not found at {path}")
    logger.debug("git %s (cwd=%s)", " ".join(args), path)
    subprocess.run(["git", *args], cwd=path, check=True)


def commit_paths(
    repo_path: str | Path,
    paths: list[str | Path],
    message: str,
    push: bool = False,
) -> str:
    """Stage *paths* (relative to the repo root), commit and optionally push.

    Returns:
        The new commit SHA.

    Raises:
        git.GitCommandError: If staging, committing or pushing fails.
    """
    repo = Repo(repo_path)
    repo.git.add("--", *[str(p) for p in paths])
    repo.git.commit("-m", message)
    sha = repo.head.commit.hexsha
    logger.debug("Committed %s in %s", sha[:12], repo_path)

    if push:
        console.print("[dim]Pushing to remote repository...[/]")
        repo.git.push()
        console.print("[green]Pushed to remote repository.[/]")

    return sha

