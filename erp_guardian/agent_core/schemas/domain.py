from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import ConfigDict, Field

from .base import BaseSchema


class GuardianAction(str, Enum):
    allow = "allow"
    reject = "reject"
    warn = "warn"
    require_confirmation = "require_confirmation"


class ToolCall(BaseSchema):
    """A tool call proposed by the agent. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    tool_call_id: str
    tool_name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    result_summary: Optional[str] = None


class Rule(BaseSchema):
    """
    A caller-supplied declarative rule.

    ``condition`` is a JSON-encoded predicate of the form
    ``{"tool": ..., "field": ..., "operator": ..., "value": ...}``. Rules
    arrive with every request and are never stored by the guardrail. Extra
    keys sent by the client (timestamps, sync metadata) are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    condition: str
    action: GuardianAction
    message: Optional[str] = None
    priority: int = 0
    enabled: bool = True


class DiffPreview(BaseSchema):
    before: Dict[str, Any]
    after: Dict[str, Any]


class ProcessedToolCall(BaseSchema):
    """Unit of output of the verification pipeline."""

    tool_call_id: Optional[str] = None
    tool_name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    result_summary: str = ""
    confidence: float = Field(ge=0.0, le=1.0)
    action: GuardianAction
    message: Optional[str] = None
    diff_preview: Optional[DiffPreview] = None
    is_verification: bool = False


class BackendConfig(BaseSchema):
    """ERP connection settings forwarded to the tool registry."""

    model_config = ConfigDict(extra="ignore")

    provider: Optional[Literal["demo", "1c", "sap", "odoo", "custom"]] = None
    base_url: Optional[str] = None
    db: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None
    api_type: Optional[Literal["rest", "odata", "graphql"]] = None
    open_api_spec_url: Optional[str] = None
    currency: Optional[str] = None
