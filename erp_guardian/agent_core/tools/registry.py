from __future__ import annotations

"""Tool registry.

The registry maps a tool name to an executable tool implementation. The
verification pipeline obtains a mapping through a ``ToolRegistryProvider``,
which decides which tools a user can reach for a given back-end
configuration.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Protocol

from ..errors import ToolNotFoundError
from ..schemas.domain import BackendConfig
from .base import Tool


def require_tool(tools: Mapping[str, Tool], name: str) -> Tool:
    """
    Look up an executable tool in any name -> tool mapping.

    Raises:
        ToolNotFoundError: If ``name`` is missing or the tool has no callable ``execute``.
    """
    tool = tools.get(name)
    if tool is None or not callable(getattr(tool, "execute", None)):
        raise ToolNotFoundError(name)
    return tool


class ToolRegistry(Mapping[str, Tool]):
    """
    In-memory mapping of tool names to implementations.

    Notes:
        - ``register`` overwrites any existing mapping for the tool name.
        - ``get`` returns ``None`` for unknown names (``Mapping`` semantics);
          ``require`` raises ``ToolNotFoundError``.
    """

    def __init__(self) -> None:
        """Initialize an empty tool registry."""
        self._tools: Dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """
        Register a tool implementation.

        Args:
            tool: The tool instance to register. It must expose a ``name`` attribute.
        """
        self._tools[tool.name] = tool

    def require(self, name: str) -> Tool:
        """
        Retrieve a registered, executable tool by name.

        Raises:
            ToolNotFoundError: If no tool is registered under ``name`` or it has no ``execute``.
        """
        return require_tool(self._tools, name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def __getitem__(self, name: str) -> Tool:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)


class ToolRegistryProvider(Protocol):
    """Resolve the tools available to a user.

    Implementations typically build ERP adapters from ``backend_config`` and
    wrap them as tools.
    """

    async def get_tools(self, user_id: str, backend_config: Optional[BackendConfig] = None) -> Mapping[str, Tool]: ...


@dataclass(frozen=True)
class StaticToolRegistryProvider(ToolRegistryProvider):
    """ToolRegistryProvider backed by a single in-memory registry.

    Every user and back-end configuration sees the same tools.
    """

    registry: ToolRegistry

    async def get_tools(self, user_id: str, backend_config: Optional[BackendConfig] = None) -> Mapping[str, Tool]:
        return self.registry
