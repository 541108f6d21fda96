"""GitHub Copilot adapter — instruction files under ``.github/instructions``.

Instructions are single files named either ``<name>.instructions.md`` or
``<name>.md``; a bare name must resolve to exactly one of them.
"""

from ais.adapters.base import file_adapter

SUFFIX_INSTRUCTIONS_MD = ".instructions.md"
SUFFIX_MD = ".md"

copilot_instructions = file_adapter(
    tool="copilot",
    subtype="instructions",
    default_source_dir=".github/instructions",
    target_dir=".github/instructions",
    file_suffixes=(SUFFIX_INSTRUCTIONS_MD, SUFFIX_MD),
    label="Instruction",
)
