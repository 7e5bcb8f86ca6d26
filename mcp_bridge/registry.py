"""Tool registry and the immutable catalog handed to the dispatcher."""

from __future__ import annotations

import importlib
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .base import BaseTool
from .protocol import ToolDescriptor
from ._logging import get_logger

logger = get_logger(__name__)


class ToolCatalog:
    """Read-only snapshot of the registered tools, keyed by name."""

    def __init__(self, tools: Mapping[str, BaseTool]) -> None:
        self._tools: Mapping[str, BaseTool] = MappingProxyType(dict(tools))
        self._descriptors: tuple[ToolDescriptor, ...] = tuple(
            tool.describe() for tool in self._tools.values()
        )

    def descriptors(self) -> List[ToolDescriptor]:
        """Return descriptors in registration order."""
        return list(self._descriptors)

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


class ToolRegistry:
    """Startup-time builder; ``freeze`` produces the catalog used at runtime."""

    def __init__(self) -> None:
        self._tools: Dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> BaseTool:
        """Register a tool implementation."""
        if not getattr(tool, "name", None):
            raise ValueError("tool name must not be empty")
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        logger.info("Registered MCP tool", tool=tool.name)
        return tool

    def register_all(self, tools: Iterable[BaseTool]) -> None:
        for tool in tools:
            self.register(tool)

    def freeze(self) -> ToolCatalog:
        catalog = ToolCatalog(self._tools)
        logger.info("Tool catalog ready", tools=catalog.names())
        return catalog

    def __len__(self) -> int:
        return len(self._tools)


def load_tool_modules(registry: ToolRegistry, module_paths: Iterable[str]) -> None:
    """
    Import each module and let it register its tools.

    Every module must expose ``register_tools(registry)``.
    """
    for module_path in module_paths:
        module = importlib.import_module(module_path)
        register = getattr(module, "register_tools", None)
        if register is None:
            raise ValueError(f"Tool module '{module_path}' has no register_tools()")
        before = len(registry)
        register(registry)
        logger.info(
            "Loaded tool module",
            module=module_path,
            registered=len(registry) - before,
        )
