"""ai-rules-sync — link rules, commands, skills, instructions and agents from a git repository into projects."""

__version__ = "0.4.0"
