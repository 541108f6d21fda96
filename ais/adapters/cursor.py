"""Cursor adapters — rules, commands, skills and plans under ``.cursor/``."""

from ais.adapters.base import Adapter, SyncMode, file_adapter

cursor_rules = Adapter(
    tool="cursor",
    subtype="rules",
    default_source_dir=".cursor/rules",
    target_dir=".cursor/rules",
    mode=SyncMode.DIRECTORY,
)

cursor_commands = file_adapter(
    tool="cursor",
    subtype="commands",
    default_source_dir=".cursor/commands",
    target_dir=".cursor/commands",
    file_suffixes=(".md",),
    label="Command",
)

cursor_skills = Adapter(
    tool="cursor",
    subtype="skills",
    default_source_dir=".cursor/skills",
    target_dir=".cursor/skills",
    mode=SyncMode.DIRECTORY,
)

# Plans live under a top-level plans/ directory in the rules repository.
cursor_plans = file_adapter(
    tool="cursor",
    subtype="plans",
    default_source_dir="plans",
    target_dir=".cursor/plans",
    file_suffixes=(".md",),
    label="Plan",
    exact_fallback=True,
)
