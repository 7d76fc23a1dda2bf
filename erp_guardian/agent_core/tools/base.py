from __future__ import annotations

"""Tool protocol and execution data models.

A tool is the concrete execution unit behind a tool call. The pipeline
resolves tool names through a ``ToolRegistry`` and executes the
implementation with a ``ToolExecutionContext``.

Tools should:

- return either plain text, a JSON-serialisable value or a ``ToolResult``,
- avoid performing policy decisions themselves (policy is enforced by the
  guardian before any mutation is committed).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol


@dataclass(frozen=True)
class ToolExecutionContext:
    """Execution context passed to tool implementations.

    Attributes
    ----------
    tool_call_id:
        Id of the call being executed. Verification reads use the synthetic
        id ``"verification"``.
    user_id:
        The user on whose behalf the tool runs.
    messages:
        Conversation messages forwarded to the tool, empty for verification.
    """

    tool_call_id: str
    user_id: str
    messages: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class ToolResult:
    """Structured tool execution result."""

    ok: bool
    output: Any


class Tool(Protocol):
    """Protocol for tool implementations."""

    name: str

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> Any: ...
