"""Sync data models — requests and results passed between adapters and the engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ais.config import RepoConfig


@dataclass
class ResolvedSource:
    """Where an entry lives in the source repository."""

    source_name: str  # May carry a file suffix the caller left out
    source_path: Path
    suffix: str | None = None  # Matched suffix, file mode only


@dataclass
class LinkResult:
    """Outcome of linking one entry."""

    source_name: str
    target_name: str
    linked: bool  # False when a real file/dir occupied the target


@dataclass
class SyncOptions:
    """A request to link one entry into a project."""

    project_path: Path
    name: str
    repo: RepoConfig
    alias: str | None = None
    is_local: bool = False


@dataclass
class ImportOptions(SyncOptions):
    """A request to move a project entry into the source repository."""

    force: bool = False
    push: bool = False
    commit_message: str | None = None


@dataclass
class ImportResult:
    source_name: str
    target_name: str
    commit_sha: str
    linked: bool
