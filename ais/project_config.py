"""Config store — project dependency manifests and repository source layout.

A consumer project records what it links in ``ai-rules-sync.json`` (shared)
and ``ai-rules-sync.local.json`` (private)::

    {"cursor": {"rules": {"react": "<repo url>",
                          "react-v2": {"url": "<repo url>", "rule": "react"}}}}

Projects created by older releases use the flat, cursor-rules-only
``cursor-rules.json`` / ``cursor-rules.local.json``. Those are read as-is
until the first write, which migrates them to the current files for good.

A source repository may carry its own ``ai-rules-sync.json`` describing
where entries live (``rootPath`` + ``sourceDir``), see ``RepoSourceConfig``.
"""

from __future__ import annotations

import json
import logging
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "ai-rules-sync.json"
LOCAL_CONFIG_FILENAME = "ai-rules-sync.local.json"

# Legacy single-tool format, read-only.
LEGACY_CONFIG_FILENAME = "cursor-rules.json"
LEGACY_LOCAL_CONFIG_FILENAME = "cursor-rules.local.json"
LEGACY_CONFIG_PATH = ("cursor", "rules")

# Top-level keys that never hold dependency records.
_RESERVED_KEYS = {"rootPath", "sourceDir"}

ConfigPath = tuple[str, str]
DependencyValue = Union[str, dict]


class ConfigSource(Enum):
    """Which set of manifest files a project currently uses."""

    NEW = "new"
    LEGACY = "legacy"
    NONE = "none"


@dataclass
class DependencyEntry:
    """One dependency record, decoded."""

    alias: str  # Key in the manifest, the name inside the project
    url: str
    name: str  # Entry name in the source repository

    @property
    def is_aliased(self) -> bool:
        return self.alias != self.name

    @classmethod
    def parse(cls, key: str, value: DependencyValue) -> DependencyEntry:
        if isinstance(value, str):
            return cls(alias=key, url=value, name=key)
        return cls(alias=key, url=value["url"], name=value.get("rule") or key)

    def to_value(self) -> DependencyValue:
        if self.is_aliased:
            return {"url": self.url, "rule": self.name}
        return self.url


@dataclass
class ProjectConfig:
    """Canonical in-memory manifest: ``(tool, subtype) -> {alias: value}``."""

    sections: dict[ConfigPath, dict[str, DependencyValue]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> ProjectConfig:
        sections: dict[ConfigPath, dict[str, DependencyValue]] = {}
        for tool, subtypes in data.items():
            if tool in _RESERVED_KEYS or not isinstance(subtypes, dict):
                continue
            for subtype, records in subtypes.items():
                # String values are source-dir overrides of a rules repository.
                if isinstance(records, dict):
                    sections[(tool, subtype)] = dict(records)
        return cls(sections=sections)

    @classmethod
    def from_legacy_dict(cls, data: dict) -> ProjectConfig:
        return cls(sections={LEGACY_CONFIG_PATH: dict(data.get("rules") or {})})

    def entries(self, config_path: ConfigPath) -> dict[str, DependencyValue]:
        return self.sections.get(tuple(config_path), {})

    def dependencies(self, config_path: ConfigPath) -> list[DependencyEntry]:
        return [
            DependencyEntry.parse(key, value)
            for key, value in self.entries(config_path).items()
        ]

    def count_for_tool(self, tool: str) -> int:
        return sum(len(v) for (t, _), v in self.sections.items() if t == tool)

    def merged_with(self, override: ProjectConfig) -> ProjectConfig:
        """Merge per section; entries of *override* win for identical aliases."""
        merged = {key: dict(value) for key, value in self.sections.items()}
        for key, value in override.sections.items():
            merged.setdefault(key, {}).update(value)
        return ProjectConfig(sections=merged)

    def to_dict(self) -> dict:
        data: dict = {}
        for (tool, subtype), records in self.sections.items():
            data.setdefault(tool, {})[subtype] = dict(records)
        return data


@dataclass
class DependencyRemoval:
    """Outcome of removing an alias from the manifests."""

    removed_from: list[str] = field(default_factory=list)
    migrated: bool = False


def config_filename(is_local: bool) -> str:
    return LOCAL_CONFIG_FILENAME if is_local else CONFIG_FILENAME


def _read_json(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _write_json(path: Path, data: dict) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


# ---------------------------------------------------------------------------
# Project manifests
# ---------------------------------------------------------------------------


def get_config_source(project_path: str | Path) -> ConfigSource:
    project = Path(project_path)
    if (project / CONFIG_FILENAME).exists() or (project / LOCAL_CONFIG_FILENAME).exists():
        return ConfigSource.NEW
    if (project / LEGACY_CONFIG_FILENAME).exists() or (
        project / LEGACY_LOCAL_CONFIG_FILENAME
    ).exists():
        return ConfigSource.LEGACY
    return ConfigSource.NONE


def _load_pair(project: Path, source: ConfigSource) -> tuple[ProjectConfig, ProjectConfig]:
    """Load (public, private) manifests for the given format."""
    if source is ConfigSource.NEW:
        return (
            ProjectConfig.from_dict(_read_json(project / CONFIG_FILENAME)),
            ProjectConfig.from_dict(_read_json(project / LOCAL_CONFIG_FILENAME)),
        )
    if source is ConfigSource.LEGACY:
        return (
            ProjectConfig.from_legacy_dict(_read_json(project / LEGACY_CONFIG_FILENAME)),
            ProjectConfig.from_legacy_dict(_read_json(project / LEGACY_LOCAL_CONFIG_FILENAME)),
        )
    return ProjectConfig(), ProjectConfig()


def load_project_config(project_path: str | Path) -> ProjectConfig:
    """Read the combined (public + private) manifest of a project.

    Current-format files are used exclusively when any of them exists;
    otherwise legacy files are projected into the current shape.
    """
    project = Path(project_path)
    public, private = _load_pair(project, get_config_source(project))
    return public.merged_with(private)


def get_local_entries(
    project_path: str | Path, config_path: ConfigPath
) -> dict[str, DependencyValue]:
    """Return the private-manifest records of one section."""
    project = Path(project_path)
    _, private = _load_pair(project, get_config_source(project))
    return private.entries(config_path)


def migrate_legacy_to_new(project_path: str | Path) -> bool:
    """Rewrite legacy manifests as current-format files.

    Only write paths call this. Once a current-format file exists the
    project is no longer legacy, so later calls do nothing.

    Returns:
        True if a migration happened.
    """
    project = Path(project_path)
    if get_config_source(project) is not ConfigSource.LEGACY:
        return False

    public, private = _load_pair(project, ConfigSource.LEGACY)
    _write_json(project / CONFIG_FILENAME, public.to_dict())
    if private.entries(LEGACY_CONFIG_PATH):
        _write_json(project / LOCAL_CONFIG_FILENAME, private.to_dict())

    logger.debug("Migrated legacy manifests in %s", project)
    return True


def add_dependency(
    project_path: str | Path,
    config_path: ConfigPath,
    name: str,
    repo_url: str,
    alias: str | None = None,
    is_local: bool = False,
) -> bool:
    """Record *name* (optionally as *alias*) in the public or private manifest.

    Returns:
        True if legacy manifests were migrated first.
    """
    project = Path(project_path)
    migrated = migrate_legacy_to_new(project)

    path = project / config_filename(is_local)
    data = _read_json(path)
    tool, subtype = config_path

    section = data.setdefault(tool, {}).setdefault(subtype, {})
    entry = DependencyEntry(alias=alias or name, url=repo_url, name=name)
    section[entry.alias] = entry.to_value()

    _write_json(path, data)
    return migrated


def remove_dependency(
    project_path: str | Path, config_path: ConfigPath, alias: str
) -> DependencyRemoval:
    """Remove *alias* from both the public and the private manifest."""
    project = Path(project_path)
    result = DependencyRemoval(migrated=migrate_legacy_to_new(project))
    tool, subtype = config_path

    for filename in (CONFIG_FILENAME, LOCAL_CONFIG_FILENAME):
        path = project / filename
        data = _read_json(path)
        section = data.get(tool, {}).get(subtype)
        if isinstance(section, dict) and alias in section:
            del section[alias]
            _write_json(path, data)
            result.removed_from.append(filename)

    return result


# ---------------------------------------------------------------------------
# Repository source layout
# ---------------------------------------------------------------------------


@dataclass
class RepoSourceConfig:
    """Where entries live inside a source repository.

    Two on-disk shapes are accepted::

        {"rootPath": "src", "sourceDir": {"cursor": {"rules": "rules"}}}
        {"rootPath": "src", "cursor": {"rules": "rules"}}          # legacy flat

    In the flat shape an override is told apart from a dependency record
    only by its type: a string is a directory, an object is a record.
    """

    root_path: str = ""
    source_dirs: dict[ConfigPath, str] = field(default_factory=dict)
    legacy_flat: bool = False

    def source_dir_for(self, tool: str, subtype: str, default: str) -> str:
        directory = self.source_dirs.get((tool, subtype))
        if directory is None:
            directory = default
        # An empty override means the root itself.
        parts = [p for p in (self.root_path, directory) if p]
        return posixpath.join(*parts) if parts else ""

    def to_dict(self) -> dict:
        """Serialize in the nested ``sourceDir`` shape."""
        data: dict = {}
        if self.root_path:
            data["rootPath"] = self.root_path
        if self.source_dirs:
            source_dir: dict = {}
            for (tool, subtype), directory in self.source_dirs.items():
                source_dir.setdefault(tool, {})[subtype] = directory
            data["sourceDir"] = source_dir
        return data


def _flat_overrides(data: dict) -> dict[ConfigPath, str]:
    overrides: dict[ConfigPath, str] = {}
    for tool, subtypes in data.items():
        if tool in _RESERVED_KEYS or not isinstance(subtypes, dict):
            continue
        for subtype, value in subtypes.items():
            if isinstance(value, str):
                overrides[(tool, subtype)] = value
    return overrides


def load_repo_source_config(repo_dir: str | Path) -> RepoSourceConfig:
    """Read the source layout of a repository (empty if it has no config)."""
    data = _read_json(Path(repo_dir) / CONFIG_FILENAME)
    root_path = data.get("rootPath") or ""

    source_dir = data.get("sourceDir")
    if isinstance(source_dir, dict):
        dirs = {
            (tool, subtype): value
            for tool, subtypes in source_dir.items()
            if isinstance(subtypes, dict)
            for subtype, value in subtypes.items()
            if isinstance(value, str)
        }
        return RepoSourceConfig(root_path=root_path, source_dirs=dirs)

    overrides = _flat_overrides(data)
    if overrides:
        return RepoSourceConfig(root_path=root_path, source_dirs=overrides, legacy_flat=True)
    return RepoSourceConfig(root_path=root_path)


def migrate_repo_source_config(repo_dir: str | Path) -> bool:
    """Move flat string overrides under ``sourceDir`` in the repository config.

    Object-valued keys (dependency records of the repository itself) are
    left where they are.

    Returns:
        True if the file was rewritten.
    """
    config = load_repo_source_config(repo_dir)
    if not config.legacy_flat:
        return False

    path = Path(repo_dir) / CONFIG_FILENAME
    data = _read_json(path)
    for tool, subtype in config.source_dirs:
        del data[tool][subtype]
        if not data[tool]:
            del data[tool]
    data["sourceDir"] = RepoSourceConfig(source_dirs=config.source_dirs).to_dict()["sourceDir"]

    _write_json(path, data)
    logger.debug("Migrated %s to the sourceDir layout", path)
    return True
