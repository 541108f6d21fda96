"""Tests for the sync engine: linking, unlinking and importing entries."""

import json
from pathlib import Path

import pytest
from git import GitCommandError, Repo

from ais.adapters.claude import claude_agents
from ais.adapters.copilot import copilot_instructions
from ais.adapters.cursor import cursor_commands, cursor_plans, cursor_rules
from ais.config import RepoConfig
from ais.errors import AlreadyExistsError, AlreadyManagedError, EntryNotFoundError
from ais.project_config import CONFIG_FILENAME
from ais.sync.engine import (
    GIT_INFO_EXCLUDE,
    GITIGNORE,
    IGNORE_HEADER,
    import_entry,
    link_entry,
    unlink_entry,
)
from ais.sync.models import ImportOptions, SyncOptions

from conftest import init_rules_repo


def _opts(project, repo, name, alias=None, is_local=False):
    return SyncOptions(project_path=project, name=name, repo=repo, alias=alias, is_local=is_local)


def _lines(path: Path) -> list[str]:
    return path.read_text().splitlines() if path.exists() else []


def rules_repo_config(path: Path) -> RepoConfig:
    return RepoConfig(name=path.name, url=f"https://example.com/{path.name}.git", path=path)


# --- Linking ---


def test_link_directory_entry(project, rules_repo):
    result = link_entry(cursor_rules, _opts(project, rules_repo, "react"))

    assert result.linked
    assert result.source_name == result.target_name == "react"
    target = project / ".cursor/rules/react"
    assert target.is_symlink()
    assert target.resolve() == (rules_repo.path / ".cursor/rules/react").resolve()
    assert (target / "react.mdc").read_text() == "# React rules\n"
    assert _lines(project / GITIGNORE) == [IGNORE_HEADER, ".cursor/rules/react"]


def test_link_with_alias(project, rules_repo):
    result = link_entry(claude_agents, _opts(project, rules_repo, "reviewer", alias="strict"))

    assert result.target_name == "strict"
    assert (project / ".claude/agents/strict").is_symlink()
    assert ".claude/agents/strict" in _lines(project / GITIGNORE)


def test_link_is_idempotent(project, rules_repo):
    link_entry(cursor_rules, _opts(project, rules_repo, "react"))
    result = link_entry(cursor_rules, _opts(project, rules_repo, "react"))

    assert result.linked
    assert (project / ".cursor/rules/react").is_symlink()
    assert _lines(project / GITIGNORE).count(".cursor/rules/react") == 1
    assert _lines(project / GITIGNORE).count(IGNORE_HEADER) == 1


def test_link_skips_real_directory(project, rules_repo):
    occupied = project / ".cursor/rules/react"
    occupied.mkdir(parents=True)
    (occupied / "mine.mdc").write_text("keep me")

    result = link_entry(cursor_rules, _opts(project, rules_repo, "react"))

    assert not result.linked
    assert not occupied.is_symlink()
    assert (occupied / "mine.mdc").read_text() == "keep me"
    assert not (project / GITIGNORE).exists()


def test_link_missing_entry(project, rules_repo):
    with pytest.raises(EntryNotFoundError):
        link_entry(cursor_rules, _opts(project, rules_repo, "angular"))
    assert not (project / ".cursor/rules/angular").exists()


def test_link_file_entry_resolves_suffix(project, rules_repo):
    result = link_entry(copilot_instructions, _opts(project, rules_repo, "style", alias="house"))

    assert result.source_name == "style.instructions.md"
    assert result.target_name == "house.instructions.md"
    target = project / ".github/instructions/house.instructions.md"
    assert target.is_symlink()
    assert target.read_text() == "Use black.\n"


def test_link_command_file(project, rules_repo):
    result = link_entry(cursor_commands, _opts(project, rules_repo, "review"))
    assert result.target_name == "review.md"
    assert (project / ".cursor/commands/review.md").read_text() == "Review the diff.\n"


def test_link_plan_from_plans_dir(project, rules_repo):
    result = link_entry(cursor_plans, _opts(project, rules_repo, "launch", alias="q3"))

    assert result.source_name == "launch.md"
    assert result.target_name == "q3.md"
    assert (project / ".cursor/plans/q3.md").read_text() == "# Launch plan\n"
    assert ".cursor/plans/q3.md" in _lines(project / GITIGNORE)


def test_private_link_goes_to_exclude(project, rules_repo):
    link_entry(cursor_rules, _opts(project, rules_repo, "vue", is_local=True))

    assert ".cursor/rules/vue" in _lines(project / GIT_INFO_EXCLUDE)
    assert not (project / GITIGNORE).exists()


def test_private_link_without_git_info(tmp_path, rules_repo):
    project = tmp_path / "bare-project"
    project.mkdir()

    result = link_entry(cursor_rules, _opts(project, rules_repo, "vue", is_local=True))

    assert result.linked
    assert (project / ".cursor/rules/vue").is_symlink()
    assert not (project / GIT_INFO_EXCLUDE).exists()
    assert not (project / GITIGNORE).exists()


def test_link_honours_repository_source_dir(tmp_path, project):
    path = tmp_path / "custom"
    init_rules_repo(
        path,
        {
            CONFIG_FILENAME: json.dumps(
                {"rootPath": "src", "sourceDir": {"cursor": {"rules": "rules"}}}
            ),
            "src/rules/go/go.mdc": "# Go\n",
        },
    )
    repo = rules_repo_config(path)

    result = link_entry(cursor_rules, _opts(project, repo, "go"))

    assert result.linked
    assert (project / ".cursor/rules/go").resolve() == (path / "src/rules/go").resolve()


def test_link_with_empty_source_dir_uses_repository_root(tmp_path, project):
    path = tmp_path / "flat"
    init_rules_repo(
        path,
        {
            CONFIG_FILENAME: json.dumps({"sourceDir": {"cursor": {"rules": ""}}}),
            "react/react.mdc": "# React\n",
        },
    )

    result = link_entry(cursor_rules, _opts(project, rules_repo_config(path), "react"))

    assert result.linked
    assert (project / ".cursor/rules/react").resolve() == (path / "react").resolve()


# --- Unlinking ---


def test_unlink_removes_link_and_ignore_lines(project, rules_repo):
    link_entry(cursor_rules, _opts(project, rules_repo, "react"))
    (project / GIT_INFO_EXCLUDE).write_text(".cursor/rules/react\n")

    assert unlink_entry(cursor_rules, project, "react")

    assert not (project / ".cursor/rules/react").exists()
    assert ".cursor/rules/react" not in _lines(project / GITIGNORE)
    assert ".cursor/rules/react" not in _lines(project / GIT_INFO_EXCLUDE)
    # The source in the repository is untouched.
    assert (rules_repo.path / ".cursor/rules/react/react.mdc").exists()


def test_unlink_leaves_real_files(project):
    real = project / ".cursor/rules/mine"
    real.mkdir(parents=True)

    assert not unlink_entry(cursor_rules, project, "mine")
    assert real.is_dir()


def test_unlink_missing_entry(project):
    assert not unlink_entry(cursor_rules, project, "react")


# --- Importing ---


def _import_opts(project, repo, name, **kwargs):
    return ImportOptions(project_path=project, name=name, repo=repo, **kwargs)


def _make_local_rule(project: Path, name: str = "local-rule") -> Path:
    rule = project / ".cursor/rules" / name
    rule.mkdir(parents=True)
    (rule / "rule.mdc").write_text("# Local\n")
    return rule


def test_import_moves_commits_and_links(project, rules_repo):
    _make_local_rule(project)

    result = import_entry(cursor_rules, _import_opts(project, rules_repo, "local-rule"))

    dest = rules_repo.path / ".cursor/rules/local-rule"
    assert (dest / "rule.mdc").read_text() == "# Local\n"
    assert result.linked

    git_repo = Repo(rules_repo.path)
    assert git_repo.head.commit.hexsha == result.commit_sha
    assert git_repo.head.commit.message.strip() == "Import cursor rules: local-rule"
    assert not git_repo.is_dirty(untracked_files=True)

    link = project / ".cursor/rules/local-rule"
    assert link.is_symlink()
    assert link.resolve() == dest.resolve()
    assert ".cursor/rules/local-rule" in _lines(project / GITIGNORE)


def test_import_custom_message(project, rules_repo):
    _make_local_rule(project)
    import_entry(
        cursor_rules,
        _import_opts(project, rules_repo, "local-rule", commit_message="Add local rule"),
    )
    assert Repo(rules_repo.path).head.commit.message.strip() == "Add local rule"


def test_import_file_entry(project, rules_repo):
    path = project / ".github/instructions/docs.instructions.md"
    path.parent.mkdir(parents=True)
    path.write_text("Write docs.\n")

    result = import_entry(
        copilot_instructions, _import_opts(project, rules_repo, "docs.instructions.md")
    )

    assert result.target_name == "docs.instructions.md"
    assert path.is_symlink()
    assert (rules_repo.path / ".github/instructions/docs.instructions.md").exists()


def test_import_rejects_symlink(project, rules_repo):
    link_entry(cursor_rules, _opts(project, rules_repo, "react"))
    head = Repo(rules_repo.path).head.commit.hexsha

    with pytest.raises(AlreadyManagedError):
        import_entry(cursor_rules, _import_opts(project, rules_repo, "react"))
    assert Repo(rules_repo.path).head.commit.hexsha == head


def test_import_missing_entry(project, rules_repo):
    with pytest.raises(EntryNotFoundError):
        import_entry(cursor_rules, _import_opts(project, rules_repo, "ghost"))


def test_import_existing_destination_requires_force(project, rules_repo):
    rule = project / ".cursor/rules/react"
    rule.mkdir(parents=True)
    (rule / "react.mdc").write_text("# Mine\n")

    with pytest.raises(AlreadyExistsError):
        import_entry(cursor_rules, _import_opts(project, rules_repo, "react"))
    # Nothing moved.
    assert (rule / "react.mdc").read_text() == "# Mine\n"
    assert not rule.is_symlink()

    import_entry(cursor_rules, _import_opts(project, rules_repo, "react", force=True))
    assert (rules_repo.path / ".cursor/rules/react/react.mdc").read_text() == "# Mine\n"
    assert rule.is_symlink()


def test_import_rewrites_legacy_repo_layout(tmp_path, project):
    path = tmp_path / "legacy"
    init_rules_repo(path, {CONFIG_FILENAME: json.dumps({"cursor": {"rules": "my-rules"}})})
    repo = rules_repo_config(path)
    _make_local_rule(project)

    import_entry(cursor_rules, _import_opts(project, repo, "local-rule"))

    assert (path / "my-rules/local-rule/rule.mdc").exists()
    data = json.loads((path / CONFIG_FILENAME).read_text())
    assert data == {"sourceDir": {"cursor": {"rules": "my-rules"}}}
    assert not Repo(path).is_dirty(untracked_files=True)


def test_import_commit_failure_keeps_project_entry(project, rules_repo):
    # Same content as the committed entry, so there is nothing to commit.
    rule = project / ".cursor/rules/react"
    rule.mkdir(parents=True)
    (rule / "react.mdc").write_text("# React rules\n")
    head = Repo(rules_repo.path).head.commit.hexsha

    with pytest.raises(GitCommandError):
        import_entry(cursor_rules, _import_opts(project, rules_repo, "react", force=True))

    assert rule.is_dir()
    assert not rule.is_symlink()
    assert (rule / "react.mdc").read_text() == "# React rules\n"
    assert (rules_repo.path / ".cursor/rules/react/react.mdc").exists()
    assert Repo(rules_repo.path).head.commit.hexsha == head
    assert not (project / GITIGNORE).exists()
