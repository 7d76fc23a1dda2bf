from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest

from erp_guardian.agent_core.schemas.domain import GuardianAction, Rule
from erp_guardian.agent_core.tools.base import ToolExecutionContext
from erp_guardian.agent_core.tools.registry import StaticToolRegistryProvider, ToolRegistry


@dataclass
class FakeTool:
    """Tool double recording every call it receives."""

    name: str
    output: Any = "ok"
    raises: Optional[BaseException] = None
    calls: List[tuple[Dict[str, Any], ToolExecutionContext]] = field(default_factory=list)

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> Any:
        self.calls.append((args, ctx))
        if self.raises is not None:
            raise self.raises
        if callable(self.output):
            return self.output(args)
        return self.output


def make_rule(
    condition: Dict[str, Any] | str,
    *,
    action: GuardianAction = GuardianAction.reject,
    rule_id: str = "rule-1",
    name: str = "test rule",
    message: Optional[str] = None,
    priority: int = 0,
    enabled: bool = True,
) -> Rule:
    return Rule(
        id=rule_id,
        name=name,
        condition=condition if isinstance(condition, str) else json.dumps(condition),
        action=action,
        message=message,
        priority=priority,
        enabled=enabled,
    )


@pytest.fixture
def rule_factory() -> Callable[..., Rule]:
    return make_rule


@pytest.fixture
def tool_factory() -> Callable[..., FakeTool]:
    return FakeTool


@pytest.fixture
def stock_tool() -> FakeTool:
    return FakeTool(name="get_stock", output=lambda args: f"{args.get('product_name')}: 50 units in stock")


@pytest.fixture
def products_tool() -> FakeTool:
    return FakeTool(name="get_products", output=lambda args: [{"id": args.get("product_id"), "price": 100}])


@pytest.fixture
def document_tool() -> FakeTool:
    return FakeTool(name="get_document", output={"id": "doc-456", "status": "posted"})


@pytest.fixture
def registry(stock_tool: FakeTool, products_tool: FakeTool, document_tool: FakeTool) -> ToolRegistry:
    reg = ToolRegistry()
    reg.register(stock_tool)
    reg.register(products_tool)
    reg.register(document_tool)
    return reg


@pytest.fixture
def tool_provider(registry: ToolRegistry) -> StaticToolRegistryProvider:
    return StaticToolRegistryProvider(registry=registry)
