"""Schemas and DTOs for the agent core."""

from .domain import (
    BackendConfig,
    DiffPreview,
    GuardianAction,
    ProcessedToolCall,
    Rule,
    ToolCall,
)

__all__ = [
    "BackendConfig",
    "DiffPreview",
    "GuardianAction",
    "ProcessedToolCall",
    "Rule",
    "ToolCall",
]
