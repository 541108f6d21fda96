"""Error kinds raised by the sync engine, config store and registry."""

from __future__ import annotations


class SyncError(ValueError):
    """Base class for user-facing failures of a single operation."""


class EntryNotFoundError(SyncError):
    """A source entry (or a project entry to import) does not exist."""


class AmbiguousSuffixError(SyncError):
    """A bare file-mode name matches more than one recognized suffix."""

    def __init__(self, name: str, candidates: list[str]):
        self.name = name
        self.candidates = candidates
        quoted = " and ".join(f'"{c}"' for c in candidates)
        super().__init__(
            f"Both {quoted} exist in repository. Please specify the suffix explicitly."
            if len(candidates) == 2
            else f"{quoted} all exist in repository. Please specify the suffix explicitly."
        )


class AlreadyManagedError(SyncError):
    """The project entry is already a symlink managed by this tool."""


class AlreadyExistsError(SyncError):
    """The import destination already exists in the source repository."""


class ConfigNotFoundError(SyncError):
    """No repository is configured for an operation that needs one."""


class UnknownAdapterError(SyncError):
    """No adapter is registered for the requested tool/subtype."""


class AmbiguousAliasError(SyncError):
    """An alias matches entries in more than one place."""


class ModeInferenceError(SyncError):
    """The tool to operate on could not be inferred from the project config."""
