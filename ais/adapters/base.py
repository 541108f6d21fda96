"""Adapter descriptor — how one entry kind is located, named and linked.

An adapter is plain data: the fixed descriptor fields plus two optional
hook callables. The engine looks the hooks up as fields and falls back to
its default behaviour when they are ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ais import project_config
from ais.adapters.suffix import suffix_source_resolver, suffix_target_namer
from ais.project_config import DependencyRemoval
from ais.sync import engine
from ais.sync.models import LinkResult, ResolvedSource, SyncOptions

# (repo_dir, source_dir, name) -> ResolvedSource
SourceResolver = Callable[[Path, str, str], ResolvedSource]
# (name, alias, source_suffix) -> target name
TargetNamer = Callable[[str, Optional[str], Optional[str]], str]


class SyncMode(Enum):
    """Whether an entry is a whole directory or a single file."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class Adapter:
    """Capability descriptor for one (tool, subtype) entry kind."""

    tool: str  # e.g. "cursor"
    subtype: str  # e.g. "rules"
    default_source_dir: str  # Relative to the source repository root
    target_dir: str  # Relative to the project root
    mode: SyncMode = SyncMode.DIRECTORY
    file_suffixes: tuple[str, ...] = ()
    resolve_source: SourceResolver | None = None
    resolve_target_name: TargetNamer | None = None

    @property
    def name(self) -> str:
        return f"{self.tool}-{self.subtype}"

    @property
    def config_path(self) -> tuple[str, str]:
        return (self.tool, self.subtype)

    @property
    def entity_name(self) -> str:
        """Singular label for messages, e.g. "rule"."""
        return self.subtype[:-1] if self.subtype.endswith("s") else self.subtype

    # -- uniform operations ---------------------------------------------------

    def add_dependency(
        self,
        project_path: str | Path,
        name: str,
        repo_url: str,
        alias: str | None = None,
        is_local: bool = False,
    ) -> bool:
        """Record a dependency in this adapter's manifest section."""
        return project_config.add_dependency(
            project_path, self.config_path, name, repo_url, alias, is_local
        )

    def remove_dependency(self, project_path: str | Path, alias: str) -> DependencyRemoval:
        """Remove a dependency from this adapter's manifest section."""
        return project_config.remove_dependency(project_path, self.config_path, alias)

    def link(self, options: SyncOptions) -> LinkResult:
        return engine.link_entry(self, options)

    def unlink(self, project_path: str | Path, alias: str) -> bool:
        return engine.unlink_entry(self, project_path, alias)


def file_adapter(
    tool: str,
    subtype: str,
    default_source_dir: str,
    target_dir: str,
    file_suffixes: tuple[str, ...],
    label: str,
    exact_fallback: bool = False,
) -> Adapter:
    """Build a file-mode adapter whose hooks resolve *file_suffixes*."""
    return Adapter(
        tool=tool,
        subtype=subtype,
        default_source_dir=default_source_dir,
        target_dir=target_dir,
        mode=SyncMode.FILE,
        file_suffixes=file_suffixes,
        resolve_source=suffix_source_resolver(file_suffixes, label, exact_fallback),
        resolve_target_name=suffix_target_namer(file_suffixes),
    )
