"""Ignore-file editing — idempotent line add/remove for gitignore-style files."""

from __future__ import annotations

import re
from pathlib import Path

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def add_ignore_entry(file_path: str | Path, entry: str, header: str | None = None) -> bool:
    """Append *entry* to an ignore file unless an identical trimmed line exists.

    When *header* is given and not yet present, it is written on the line
    before the entry. The file is created if missing.

    Returns:
        True if the entry was added, False if it was already there.
    """
    path = Path(file_path)
    content = path.read_text(encoding="utf-8") if path.exists() else ""
    lines = [line.strip() for line in _LINE_SPLIT_RE.split(content)]

    if entry in lines:
        return False

    to_add = ""
    if content and not content.endswith("\n"):
        to_add += "\n"
    if header and header not in lines:
        to_add += f"{header}\n"
    to_add += f"{entry}\n"

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(to_add)
    return True


def remove_ignore_entry(file_path: str | Path, entry: str) -> bool:
    """Remove every line equal to *entry* (after trimming) from an ignore file.

    Returns:
        True if at least one line was removed, False if the file or the
        entry was absent.
    """
    path = Path(file_path)
    if not path.exists():
        return False

    lines = _LINE_SPLIT_RE.split(path.read_text(encoding="utf-8"))
    kept = [line for line in lines if line.strip() != entry]
    if len(kept) == len(lines):
        return False

    path.write_text("\n".join(kept), encoding="utf-8")
    return True
