"""File-mode suffix handling — resolve ``foo`` to ``foo.instructions.md`` or ``foo.md``.

Suffixes are tried in the order given, so more specific suffixes must come
first (``.instructions.md`` before ``.md``).
"""

from __future__ import annotations

from pathlib import Path

from ais.errors import AmbiguousAliasError, AmbiguousSuffixError, EntryNotFoundError
from ais.sync.models import ResolvedSource


def match_suffix(name: str, suffixes: tuple[str, ...]) -> str | None:
    """Return the first recognized suffix *name* ends with, if any."""
    for suffix in suffixes:
        if name.endswith(suffix) and len(name) > len(suffix):
            return suffix
    return None


def strip_suffix(name: str, suffixes: tuple[str, ...]) -> str:
    suffix = match_suffix(name, suffixes)
    return name[: -len(suffix)] if suffix else name


def suffix_source_resolver(
    suffixes: tuple[str, ...], label: str, exact_fallback: bool = False
):
    """Build a ``resolve_source`` hook for a file-mode adapter.

    A name that already carries a recognized suffix is used as-is. A bare
    name is tried with every suffix; exactly one existing candidate must
    remain. With *exact_fallback*, a bare name that matches no candidate may
    still name an existing file or directory as given.
    """

    def resolve_source(repo_dir: Path, source_dir: str, name: str) -> ResolvedSource:
        base = Path(repo_dir) / source_dir

        suffix = match_suffix(name, suffixes)
        if suffix:
            path = base / name
            if not path.exists():
                raise EntryNotFoundError(f'{label} "{name}" not found in repository.')
            return ResolvedSource(source_name=name, source_path=path, suffix=suffix)

        found = [(name + s, s) for s in suffixes if (base / (name + s)).exists()]
        if len(found) > 1:
            raise AmbiguousSuffixError(name, [candidate for candidate, _ in found])
        if found:
            candidate, suffix = found[0]
            return ResolvedSource(source_name=candidate, source_path=base / candidate, suffix=suffix)

        if exact_fallback and (base / name).exists():
            return ResolvedSource(source_name=name, source_path=base / name)

        raise EntryNotFoundError(f'{label} "{name}" not found in repository.')

    return resolve_source


def suffix_target_namer(suffixes: tuple[str, ...]):
    """Build a ``resolve_target_name`` hook that keeps the source's suffix.

    ``bar`` aliasing ``foo.instructions.md`` becomes ``bar.instructions.md``.
    """

    def resolve_target_name(
        name: str, alias: str | None = None, source_suffix: str | None = None
    ) -> str:
        base = alias or name
        if match_suffix(base, suffixes):
            return base
        if source_suffix:
            return base + source_suffix
        return base

    return resolve_target_name


def resolve_alias(alias: str, keys: list[str], suffixes: tuple[str, ...]) -> str:
    """Map a possibly bare alias onto a manifest key of a file-mode section.

    Raises:
        AmbiguousAliasError: If the bare alias matches several keys.
    """
    if not suffixes or match_suffix(alias, suffixes) or alias in keys:
        return alias
    matches = [key for key in keys if strip_suffix(key, suffixes) == alias]
    if len(matches) > 1:
        raise AmbiguousAliasError(
            f'Alias "{alias}" matches multiple entries: {", ".join(matches)}. '
            "Please specify the suffix explicitly."
        )
    return matches[0] if matches else alias
