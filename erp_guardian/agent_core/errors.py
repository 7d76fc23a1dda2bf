"""Error types for the guardrail pipeline.

Defines a small hierarchy of exceptions raised inside the pipeline to signal
malformed rules, missing tools and failed verification reads. None of them
escape the public pipeline API: each is converted into a decision or a
textual result at the boundary where it is caught.
"""

from __future__ import annotations


class GuardianError(Exception):
    """Base error for all guardrail exceptions."""


class RuleConditionError(GuardianError):
    """Raised when a rule's condition cannot be parsed."""

    def __init__(self, rule_id: str, reason: str) -> None:
        super().__init__(f"Invalid condition for rule '{rule_id}': {reason}")
        self.rule_id = rule_id


class ToolNotFoundError(GuardianError, KeyError):
    """Raised when a tool is missing from the registry or cannot be executed."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"tool '{tool_name}' not found or not executable")
        self.tool_name = tool_name

    def __str__(self) -> str:
        return str(self.args[0])


class VerificationError(GuardianError):
    """Raised for unsuccessful verification reads with additional context."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(f"{tool_name}: {message}")
        self.tool_name = tool_name
