"""Claude adapters — skills and agents under ``.claude/``."""

from ais.adapters.base import Adapter, SyncMode

claude_skills = Adapter(
    tool="claude",
    subtype="skills",
    default_source_dir=".claude/skills",
    target_dir=".claude/skills",
    mode=SyncMode.DIRECTORY,
)

claude_agents = Adapter(
    tool="claude",
    subtype="agents",
    default_source_dir=".claude/agents",
    target_dir=".claude/agents",
    mode=SyncMode.DIRECTORY,
)
