"""Tool registry contract used by the verification pipeline.

A *tool* is the execution unit behind an agent tool call (``get_stock``,
``create_invoice``...). Concrete tools wrap ERP adapters and live outside
this package; the pipeline only relies on the contract defined here:

- ``Tool``: protocol for async tool execution.
- ``ToolExecutionContext``/``ToolResult``: execution input/output models.
- ``ToolRegistry``: name -> tool mapping.
- ``ToolRegistryProvider``: resolves the tools available to a user for a
  given back-end configuration.

``catalog`` classifies the known ERP tools by risk kind and lists the
arguments each of them requires.
"""

from .base import Tool, ToolExecutionContext, ToolResult
from .catalog import ToolRiskKind, required_args, risk_kind
from .registry import StaticToolRegistryProvider, ToolRegistry, ToolRegistryProvider, require_tool

__all__ = [
    "Tool",
    "ToolExecutionContext",
    "ToolResult",
    "ToolRegistry",
    "ToolRegistryProvider",
    "StaticToolRegistryProvider",
    "ToolRiskKind",
    "required_args",
    "risk_kind",
    "require_tool",
]
