"""User-level configuration — the registry of source repositories.

Stored as JSON in ``~/.ai-rules-sync/config.json`` (or a directory passed
explicitly), with local clones kept under ``<config_dir>/repos/<name>``.
The store is an ordinary object handed to the command handlers, so tests
can point it at a temporary directory.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".ai-rules-sync"
CONFIG_DIR_ENV = "AIS_CONFIG_DIR"


@dataclass
class RepoConfig:
    """A source repository and the location of its local clone."""

    name: str
    url: str
    path: Path

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.url, "path": str(self.path)}

    @classmethod
    def from_dict(cls, data: dict) -> RepoConfig:
        return cls(name=data["name"], url=data["url"], path=Path(data["path"]))


@dataclass
class GlobalConfig:
    """In-memory form of ``config.json``."""

    repos: dict[str, RepoConfig] = field(default_factory=dict)
    current_repo: str | None = None

    @property
    def current(self) -> RepoConfig | None:
        if self.current_repo:
            return self.repos.get(self.current_repo)
        return None

    def find_by_url(self, url: str) -> RepoConfig | None:
        for repo in self.repos.values():
            if repo.url == url:
                return repo
        return None


def looks_like_url(value: str) -> bool:
    """Return True if *value* looks like a git remote rather than a repo name."""
    return "://" in value or value.startswith("git@") or value.endswith(".git")


def repo_name_from_url(url: str) -> str:
    """Derive a short repository name, e.g. ``.../team/rules.git`` -> ``rules``."""
    base = url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    if base.endswith(".git"):
        base = base[: -len(".git")]
    return base


class GlobalConfigStore:
    """Reads and writes the user-level config file."""

    CONFIG_FILE = "config.json"
    REPOS_DIR = "repos"
    LEGACY_REPO_DIR = "repo"

    def __init__(self, config_dir: str | Path | None = None):
        if config_dir is None:
            config_dir = os.environ.get(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR
        self.config_dir = Path(config_dir)
        self.config_path = self.config_dir / self.CONFIG_FILE
        self.repos_dir = self.config_dir / self.REPOS_DIR

    def load(self) -> GlobalConfig:
        """Load the config, projecting the single-``repoUrl`` format if found."""
        if not self.config_path.exists():
            return GlobalConfig()
        try:
            with open(self.config_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", self.config_path, e)
            return GlobalConfig()

        if data.get("repoUrl") and not data.get("repos"):
            return self._migrate_single_repo(data["repoUrl"])

        return GlobalConfig(
            repos={
                name: RepoConfig.from_dict(repo)
                for name, repo in (data.get("repos") or {}).items()
            },
            current_repo=data.get("currentRepo"),
        )

    def save(self, config: GlobalConfig) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        data: dict = {}
        if config.current_repo:
            data["currentRepo"] = config.current_repo
        data["repos"] = {name: repo.to_dict() for name, repo in config.repos.items()}
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")

    def register_repo(self, url: str, make_current: bool = False) -> RepoConfig:
        """Add *url* to the config, reusing an existing entry with the same URL.

        A name already used by a different URL gets a timestamp suffix.
        """
        config = self.load()
        repo = config.find_by_url(url)
        if repo is None:
            name = repo_name_from_url(url) or f"repo-{int(time.time())}"
            if name in config.repos:
                name = f"{name}-{int(time.time())}"
            repo = RepoConfig(name=name, url=url, path=self.repos_dir / name)
            config.repos[name] = repo
        if make_current:
            config.current_repo = repo.name
        self.save(config)
        return repo

    def set_current(self, name: str) -> RepoConfig:
        config = self.load()
        if name not in config.repos:
            raise KeyError(name)
        config.current_repo = name
        self.save(config)
        return config.repos[name]

    def _migrate_single_repo(self, url: str) -> GlobalConfig:
        name = "default"
        path = self.repos_dir / name
        old_dir = self.config_dir / self.LEGACY_REPO_DIR
        if old_dir.exists() and not path.exists():
            self.repos_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(old_dir), str(path))
            logger.debug("Moved legacy clone %s -> %s", old_dir, path)
        return GlobalConfig(
            repos={name: RepoConfig(name=name, url=url, path=path)},
            current_repo=name,
        )
