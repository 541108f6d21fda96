"""Adapters — one descriptor per syncable entry kind, plus the registry.

The registry provides:
- Lookup by (tool, subtype) or by adapter name ("cursor-rules")
- The default adapter of a tool (its first registered subtype)
- Discovery of the section that owns an alias in a project manifest
"""

from __future__ import annotations

from ais.adapters.base import Adapter, SyncMode, file_adapter
from ais.adapters.claude import claude_agents, claude_skills
from ais.adapters.copilot import copilot_instructions
from ais.adapters.cursor import cursor_commands, cursor_plans, cursor_rules, cursor_skills
from ais.adapters.suffix import strip_suffix
from ais.errors import ModeInferenceError, UnknownAdapterError
from ais.project_config import ProjectConfig

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "SyncMode",
    "file_adapter",
    "get_adapter",
    "get_default_adapter",
    "infer_default_tool",
    "registry",
]


class AdapterRegistry:
    """Adapters keyed by name, grouped by tool in registration order."""

    def __init__(self, adapters: list[Adapter] | None = None):
        self._adapters: dict[str, Adapter] = {}
        self._by_tool: dict[str, list[Adapter]] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            raise ValueError(f"Adapter {adapter.name} is already registered")
        self._adapters[adapter.name] = adapter
        self._by_tool.setdefault(adapter.tool, []).append(adapter)

    def get(self, tool: str, subtype: str) -> Adapter | None:
        return self._adapters.get(f"{tool}-{subtype}")

    def get_by_name(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def for_tool(self, tool: str) -> list[Adapter]:
        return list(self._by_tool.get(tool, []))

    def default_for_tool(self, tool: str) -> Adapter | None:
        adapters = self._by_tool.get(tool)
        return adapters[0] if adapters else None

    def tools(self) -> list[str]:
        return list(self._by_tool)

    def all(self) -> list[Adapter]:
        return list(self._adapters.values())

    def find_by_alias(self, config: ProjectConfig, alias: str) -> list[Adapter]:
        """Return every adapter whose manifest section owns *alias*.

        For file-mode sections a bare alias also matches keys that differ
        only by a recognized suffix.
        """
        owners = []
        for adapter in self._adapters.values():
            keys = list(config.entries(adapter.config_path))
            if alias in keys:
                owners.append(adapter)
            elif adapter.file_suffixes and any(
                strip_suffix(key, adapter.file_suffixes) == alias for key in keys
            ):
                owners.append(adapter)
        return owners


registry = AdapterRegistry(
    [
        cursor_rules,
        cursor_commands,
        cursor_skills,
        cursor_plans,
        copilot_instructions,
        claude_skills,
        claude_agents,
    ]
)


def get_adapter(tool: str, subtype: str) -> Adapter:
    adapter = registry.get(tool, subtype)
    if adapter is None:
        raise UnknownAdapterError(f"No adapter found for {tool}/{subtype}")
    return adapter


def get_default_adapter(tool: str) -> Adapter:
    adapter = registry.default_for_tool(tool)
    if adapter is None:
        raise UnknownAdapterError(f'No adapters found for tool "{tool}"')
    return adapter


def infer_default_tool(config: ProjectConfig, tools: list[str] | None = None) -> str:
    """Return the only tool that has entries in the manifest.

    Raises:
        ModeInferenceError: If no tool or more than one tool has entries.
    """
    tools = tools or registry.tools()
    used = [tool for tool in tools if config.count_for_tool(tool) > 0]
    names = ", ".join(f'"ais {t} ..."' for t in tools)
    if len(used) > 1:
        raise ModeInferenceError(
            f"Multiple tool configs exist in this project. Please use {names} explicitly."
        )
    if not used:
        raise ModeInferenceError(
            f"No default mode could be inferred. Please use {names} explicitly."
        )
    return used[0]
