from __future__ import annotations

"""Before/after previews of a tool call's effect.

Each known tool has a pure preview function registered under its name. A
preview is either complete (both sides populated with the same keys, minus
the tool's control keys such as ``product_id``) or absent. An absent preview
means "no preview available", never a failure: it is returned for unknown
tools and for calls missing the fields a preview needs.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..schemas.domain import BackendConfig, DiffPreview, ToolCall
from ..utils import is_present

PreviewFn = Callable[[ToolCall, "PreviewOptions"], Optional[DiffPreview]]


@dataclass(frozen=True)
class PreviewOptions:
    """Rendering options resolved for one preview."""

    currency: str


def preview_create_invoice(tool_call: ToolCall, options: PreviewOptions) -> Optional[DiffPreview]:
    items = tool_call.args.get("items")
    if not isinstance(items, list) or not items:
        return None

    before: Dict[str, Any] = {}
    after: Dict[str, Any] = {}
    for index, item in enumerate(items):
        item = item if isinstance(item, dict) else {}
        before[f"item_{index}"] = "Not created"
        after[f"item_{index}"] = (
            f"{item.get('product_name')}: {item.get('quantity')} × {item.get('price')} {options.currency}"
        )

    customer_name = tool_call.args.get("customer_name")
    if customer_name:
        before["customer"] = "Not set"
        after["customer"] = customer_name

    return DiffPreview(before=before, after=after)


def preview_get_stock(tool_call: ToolCall, options: PreviewOptions) -> Optional[DiffPreview]:
    return DiffPreview(
        before={"query": tool_call.args.get("product_name") or "N/A"},
        after={"result": tool_call.result_summary or "No results"},
    )


def preview_update_product(tool_call: ToolCall, options: PreviewOptions) -> Optional[DiffPreview]:
    if not is_present(tool_call.args.get("product_id")):
        return None

    changes = {k: v for k, v in tool_call.args.items() if k != "product_id"}
    return DiffPreview(
        before={k: "(existing value)" for k in changes},
        after=changes,
    )


def preview_delete_document(tool_call: ToolCall, options: PreviewOptions) -> Optional[DiffPreview]:
    document_id = tool_call.args.get("document_id")
    if not is_present(document_id):
        return None

    document_type = tool_call.args.get("document_type") or "Unknown"
    return DiffPreview(
        before={"status": "Document exists", "id": document_id, "type": document_type},
        after={"status": "DELETED", "id": document_id, "type": document_type},
    )


_BUILTIN_PREVIEWS: Dict[str, PreviewFn] = {
    "create_invoice": preview_create_invoice,
    "get_stock": preview_get_stock,
    "update_product": preview_update_product,
    "delete_document": preview_delete_document,
}


class DiffPreviewer:
    """Dispatch tool calls to their registered preview function.

    Adding a tool is a ``register`` call; previewers built with the default
    constructor start from the built-in previews.
    """

    def __init__(self, *, currency: str = "₽") -> None:
        self._currency = currency
        self._previews: Dict[str, PreviewFn] = dict(_BUILTIN_PREVIEWS)

    def register(self, tool_name: str, fn: PreviewFn) -> None:
        """Register (or replace) the preview function for ``tool_name``."""
        self._previews[tool_name] = fn

    def has_preview(self, tool_name: str) -> bool:
        return tool_name in self._previews

    def generate_diff_preview(
        self,
        tool_call: ToolCall,
        context: Optional[BackendConfig] = None,
    ) -> Optional[DiffPreview]:
        """
        Generate the before/after preview for a tool call.

        Args:
            tool_call: The proposed call.
            context: Back-end settings; ``context.currency`` overrides the default currency.

        Returns:
            The preview, or ``None`` when none applies.
        """
        fn = self._previews.get(tool_call.tool_name)
        if fn is None:
            return None
        currency = (context.currency if context is not None else None) or self._currency
        return fn(tool_call, PreviewOptions(currency=currency))
