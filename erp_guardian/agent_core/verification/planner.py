from __future__ import annotations

"""Chain of Verification (CoVe) planning.

Before a mutating tool runs, the pipeline reads the state it is about to
change. The planner maps each mutating tool to a pure function returning the
read-only calls to issue first:

- ``create_invoice``: ``get_stock`` for every distinct product on the invoice.
- ``update_product``: ``get_products`` for the target product.
- ``delete_document``: ``get_document`` for the target document.

Planning never executes anything. Tools without a planner need no
verification.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from ..utils import is_present


@dataclass(frozen=True)
class VerificationStep:
    """A read-only call to execute before the verified mutation."""

    tool_name: str
    args: Dict[str, Any] = field(default_factory=dict)


StepPlanner = Callable[[Dict[str, Any]], List[VerificationStep]]


def plan_create_invoice(args: Dict[str, Any]) -> List[VerificationStep]:
    items = args.get("items")
    if not isinstance(items, list):
        return []
    seen: List[str] = []
    for item in items:
        name = item.get("product_name") if isinstance(item, dict) else None
        if is_present(name) and name not in seen:
            seen.append(name)
    return [VerificationStep(tool_name="get_stock", args={"product_name": name}) for name in seen]


def plan_update_product(args: Dict[str, Any]) -> List[VerificationStep]:
    product_id = args.get("product_id")
    if not is_present(product_id):
        return []
    return [VerificationStep(tool_name="get_products", args={"product_id": product_id})]


def plan_delete_document(args: Dict[str, Any]) -> List[VerificationStep]:
    document_id = args.get("document_id")
    if not is_present(document_id):
        return []
    lookup: Dict[str, Any] = {"document_id": document_id}
    if args.get("document_type"):
        lookup["document_type"] = args["document_type"]
    return [VerificationStep(tool_name="get_document", args=lookup)]


_BUILTIN_PLANNERS: Dict[str, StepPlanner] = {
    "create_invoice": plan_create_invoice,
    "update_product": plan_update_product,
    "delete_document": plan_delete_document,
}


class VerificationPlanner:
    """Registered map from mutating tool name to its verification planner."""

    def __init__(self) -> None:
        self._planners: Dict[str, StepPlanner] = dict(_BUILTIN_PLANNERS)

    def register(self, tool_name: str, planner: StepPlanner) -> None:
        """Register (or replace) the verification planner for ``tool_name``."""
        self._planners[tool_name] = planner

    def needs_verification(self, tool_name: str) -> bool:
        return tool_name in self._planners

    def get_verification_tools(self, tool_name: str, args: Dict[str, Any]) -> List[VerificationStep]:
        """
        Plan the verification reads for a call.

        Returns:
            The read-only steps in execution order; empty for non-mutating tools.
        """
        planner = self._planners.get(tool_name)
        if planner is None:
            return []
        return planner(args)
