from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import ConfigDict

from ..schemas.base import BaseSchema
from ..schemas.domain import GuardianAction


class RuleCondition(BaseSchema):
    """
    Structured predicate parsed from ``Rule.condition``.

    Attributes:
        tool: Restricts the rule to one tool name when set.
        field: Argument the predicate reads. Top-level keys, dotted paths and
            keys of list items (e.g. invoice lines) are all accepted.
        operator: One of ``<``, ``>``, ``==``, ``!=``, ``contains``.
        value: Right-hand operand.
    """

    model_config = ConfigDict(extra="ignore")

    tool: Optional[str] = None
    field: Optional[str] = None
    operator: Optional[str] = None
    value: Any = None


@dataclass(frozen=True)
class RuleEvaluation:
    """
    Outcome of evaluating caller rules against one tool call.

    Attributes:
        allowed: False only when the matching rule rejects the call.
        action: The action of the matching rule, ``allow`` when none matched.
        message: Rule message, or ``"Rule violated: <name>"``.
        rule_id: Id of the matching rule.
    """
    allowed: bool
    action: GuardianAction
    message: Optional[str] = None
    rule_id: Optional[str] = None


class SemanticLevel(str, Enum):
    warning = "warning"
    error = "error"


@dataclass(frozen=True)
class SemanticResult:
    """
    Outcome of built-in business validation.

    ``valid=True`` with ``level=warning`` means "allowed but flag for
    confirmation", not a failure.
    """
    valid: bool
    level: Optional[SemanticLevel] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "SemanticResult":
        return cls(valid=True)

    @classmethod
    def warning(cls, message: str) -> "SemanticResult":
        return cls(valid=True, level=SemanticLevel.warning, message=message)

    @classmethod
    def error(cls, message: str) -> "SemanticResult":
        return cls(valid=False, level=SemanticLevel.error, message=message)

    @property
    def is_warning(self) -> bool:
        return self.valid and self.level == SemanticLevel.warning


@dataclass(frozen=True)
class GuardianDecision:
    """
    Merged outcome of rule and semantic checks for a specific tool call.

    Attributes:
        allowed: Whether the call may proceed (possibly after confirmation).
        action: The verdict. ``allowed=False`` always pairs with ``reject``.
        message: Human-readable explanation for anything but a plain allow.
        rule_id: Id of the caller rule that determined the verdict, if any.
    """
    allowed: bool
    action: GuardianAction
    message: Optional[str] = None
    rule_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.allowed and self.action != GuardianAction.reject:
            raise ValueError(f"a disallowed call must be rejected, got action={self.action.value}")
