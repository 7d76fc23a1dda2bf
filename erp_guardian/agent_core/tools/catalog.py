"""Static catalog of the known ERP tools.

Classifies each tool by the kind of effect it has on the back-end and lists
the arguments a well-formed call must carry. Unknown tools have no kind.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple


class ToolRiskKind(str, Enum):
    """
    Classification of tool operations for risk assessment.

    Attributes:
        read: Read-only operations (low risk).
        write: State-modifying operations (medium risk).
        high: Destructive or irreversible operations (high risk).
    """
    read = "read"
    write = "write"
    high = "high"


TOOL_RISK_KINDS: Dict[str, ToolRiskKind] = {
    "get_stock": ToolRiskKind.read,
    "get_products": ToolRiskKind.read,
    "get_document": ToolRiskKind.read,
    "create_invoice": ToolRiskKind.write,
    "update_product": ToolRiskKind.write,
    "delete_document": ToolRiskKind.high,
}

REQUIRED_ARGS: Dict[str, Tuple[str, ...]] = {
    "get_document": ("document_id",),
    "create_invoice": ("items",),
    "update_product": ("product_id",),
    "delete_document": ("document_id",),
}


def risk_kind(tool_name: str) -> Optional[ToolRiskKind]:
    """Return the risk kind of a known tool, or ``None`` for unknown tools."""
    return TOOL_RISK_KINDS.get(tool_name)


def required_args(tool_name: str) -> Tuple[str, ...]:
    """Return the argument names a call to ``tool_name`` must carry."""
    return REQUIRED_ARGS.get(tool_name, ())
