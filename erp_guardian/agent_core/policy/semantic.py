from __future__ import annotations

"""Built-in business validation for ERP tool calls.

Caller rules can only compare single argument values. The checks here cover
what such rules cannot express: invoice lines that make no sense, updates
without a target, and deletions of records that do not exist. They are
registered per tool name; tools without a check are always valid.

A check may consult live back-end state through an optional
``RecordLookup``. A failing lookup never raises: the call is flagged for
confirmation instead.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from ..utils import is_number, is_present
from .models import SemanticResult

logger = logging.getLogger(__name__)

SemanticCheck = Callable[[Dict[str, Any]], Awaitable[SemanticResult]]


class RecordLookup(Protocol):
    """Answer whether a back-end record exists (``kind`` is ``product`` or ``document``)."""

    async def exists(self, kind: str, record_id: str) -> bool: ...


class SemanticValidator:
    """Apply tool-specific business checks.

    Attributes:
        large_invoice_threshold: Invoice total above which creation needs confirmation.
    """

    def __init__(
        self,
        *,
        record_lookup: Optional[RecordLookup] = None,
        large_invoice_threshold: float = 1_000_000.0,
    ) -> None:
        self._lookup = record_lookup
        self.large_invoice_threshold = large_invoice_threshold
        self._checks: Dict[str, SemanticCheck] = {
            "create_invoice": self._check_create_invoice,
            "update_product": self._check_update_product,
            "delete_document": self._check_delete_document,
        }

    def register(self, tool_name: str, check: SemanticCheck) -> None:
        """Register (or replace) the check for ``tool_name``."""
        self._checks[tool_name] = check

    def has_check(self, tool_name: str) -> bool:
        return tool_name in self._checks

    async def validate(self, tool_name: str, args: Dict[str, Any]) -> SemanticResult:
        """
        Validate a proposed call.

        Args:
            tool_name: The proposed tool.
            args: The proposed arguments.

        Returns:
            ``SemanticResult``: valid, a warning that needs confirmation, or an error.
            A check that raises is reported as an error so the call is rejected.
        """
        check = self._checks.get(tool_name)
        if check is None:
            return SemanticResult.ok()
        try:
            return await check(args)
        except Exception as e:
            logger.exception(f"Semantic check for tool {tool_name} raised")
            return SemanticResult.error(f"Validation failed for {tool_name}: {e}")

    async def _confirm_exists(self, kind: str, record_id: Any) -> Optional[SemanticResult]:
        if self._lookup is None:
            return None
        try:
            exists = await self._lookup.exists(kind, str(record_id))
        except Exception as e:
            logger.warning(f"Record lookup for {kind} '{record_id}' failed: {e}")
            return SemanticResult.warning(f"Could not confirm that {kind} '{record_id}' exists: {e}")
        if not exists:
            return SemanticResult.error(f"{kind.capitalize()} '{record_id}' does not exist")
        return None

    async def _check_create_invoice(self, args: Dict[str, Any]) -> SemanticResult:
        items = args.get("items")
        if not isinstance(items, list) or not items:
            return SemanticResult.error("Invoice must contain at least one item")

        warnings: List[str] = []
        total = 0.0
        for idx, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                return SemanticResult.error(f"Invoice item {idx} is malformed")
            name = item.get("product_name") or f"item {idx}"

            quantity = item.get("quantity")
            if not is_number(quantity):
                return SemanticResult.error(f"Quantity for '{name}' must be a number")
            if quantity < 0:
                return SemanticResult.error(f"Quantity for '{name}' cannot be negative")
            if quantity == 0:
                return SemanticResult.error(f"Quantity for '{name}' must be greater than zero")

            price = item.get("price")
            if price is None:
                continue
            if not is_number(price):
                return SemanticResult.error(f"Price for '{name}' must be a number")
            if price < 0:
                return SemanticResult.error(f"Price for '{name}' cannot be negative")
            if price == 0:
                warnings.append(f"'{name}' has a zero price")
            total += quantity * price

        if total > self.large_invoice_threshold:
            warnings.append(f"Invoice total {total:g} exceeds {self.large_invoice_threshold:g}")
        if warnings:
            return SemanticResult.warning("; ".join(warnings))
        return SemanticResult.ok()

    async def _check_update_product(self, args: Dict[str, Any]) -> SemanticResult:
        product_id = args.get("product_id")
        if not is_present(product_id):
            return SemanticResult.error("product_id is required to update a product")

        for key in ("price", "quantity"):
            value = args.get(key)
            if value is None:
                continue
            if not is_number(value):
                return SemanticResult.error(f"{key} must be a number")
            if value < 0:
                return SemanticResult.error(f"{key} cannot be negative")

        found = await self._confirm_exists("product", product_id)
        if found is not None:
            return found

        if not any(k != "product_id" for k in args):
            return SemanticResult.warning(f"No fields to update for product '{product_id}'")
        return SemanticResult.ok()

    async def _check_delete_document(self, args: Dict[str, Any]) -> SemanticResult:
        document_id = args.get("document_id")
        if not is_present(document_id):
            return SemanticResult.error("document_id is required to delete a document")

        found = await self._confirm_exists("document", document_id)
        if found is not None:
            return found

        document_type = args.get("document_type") or "document"
        return SemanticResult.warning(f"Deleting {document_type} '{document_id}' cannot be undone")
