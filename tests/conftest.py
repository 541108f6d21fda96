"""Shared fixtures: a throwaway rules repository and project."""

from pathlib import Path

import pytest
from git import Repo

from ais.config import RepoConfig

REPO_FILES = {
    ".cursor/rules/react/react.mdc": "# React rules\n",
    ".cursor/rules/vue/vue.mdc": "# Vue rules\n",
    ".cursor/commands/review.md": "Review the diff.\n",
    ".cursor/skills/deploy/SKILL.md": "# Deploy\n",
    ".github/instructions/style.instructions.md": "Use black.\n",
    ".github/instructions/lint.md": "Run ruff.\n",
    ".claude/skills/testing/SKILL.md": "# Testing\n",
    ".claude/agents/reviewer/agent.md": "# Reviewer\n",
    "plans/launch.md": "# Launch plan\n",
}


def init_rules_repo(path: Path, files: dict[str, str] | None = None) -> Repo:
    """Create a git repository at *path* with one commit holding *files*."""
    path.mkdir(parents=True, exist_ok=True)
    repo = Repo.init(path)
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Test User")
        cw.set_value("user", "email", "test@example.com")

    for name, content in (files if files is not None else REPO_FILES).items():
        file_path = path / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)

    repo.git.add("-A")
    repo.git.commit("-m", "Initial rules", "--allow-empty")
    return repo


@pytest.fixture
def rules_repo(tmp_path: Path) -> RepoConfig:
    """A committed rules repository used directly as the local clone."""
    path = tmp_path / "rules"
    init_rules_repo(path)
    return RepoConfig(name="rules", url="https://example.com/team/rules.git", path=path)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project with a ``.git/info`` directory."""
    path = tmp_path / "project"
    (path / ".git" / "info").mkdir(parents=True)
    return path
