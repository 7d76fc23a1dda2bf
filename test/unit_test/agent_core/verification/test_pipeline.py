from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import pytest

from erp_guardian.agent_core.factory import build_guardian, build_pipeline
from erp_guardian.agent_core.preview.diff import DiffPreviewer, PreviewOptions
from erp_guardian.agent_core.schemas.domain import BackendConfig, DiffPreview, GuardianAction, ToolCall
from erp_guardian.agent_core.scoring.confidence import ConfidenceScorer
from erp_guardian.agent_core.tools.base import Tool, ToolExecutionContext, ToolResult
from erp_guardian.agent_core.tools.registry import StaticToolRegistryProvider, ToolRegistry
from erp_guardian.agent_core.verification.pipeline import VerificationPipeline
from erp_guardian.agent_core.verification.planner import VerificationPlanner, VerificationStep
from erp_guardian.core.config import Settings


def _settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "currency": "₽",
        "verification_timeout_seconds": 1.0,
        "large_invoice_threshold": 1_000_000.0,
    }
    values.update(overrides)
    return Settings(**values)


def _pipeline(provider: Any, **overrides: Any) -> VerificationPipeline:
    return build_pipeline(tool_provider=provider, config=_settings(**overrides))


def _invoice_call(tool_call_id: str = "tc-1") -> ToolCall:
    return ToolCall(
        tool_call_id=tool_call_id,
        tool_name="create_invoice",
        args={
            "items": [
                {"product_name": "Widget", "quantity": 10, "price": 100},
                {"product_name": "Gadget", "quantity": 5, "price": 200},
            ],
            "customer_name": "ACME Corp",
        },
    )


@dataclass
class SlowTool:
    name: str
    delay: float

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> Any:
        await asyncio.sleep(self.delay)
        return "too late"


class FailingProvider:
    async def get_tools(self, user_id: str, backend_config: Optional[BackendConfig] = None) -> Mapping[str, Tool]:
        raise ConnectionError("ERP unreachable")


@pytest.mark.asyncio
async def test_invoice_is_preceded_by_stock_checks(tool_provider, stock_tool) -> None:
    result = await _pipeline(tool_provider).process_tool(_invoice_call(), "user-1")

    assert [p.tool_name for p in result] == ["get_stock", "get_stock", "create_invoice"]
    first, second, call = result

    assert first.is_verification and second.is_verification
    assert first.args == {"product_name": "Widget"}
    assert first.result_summary == "Widget: 50 units in stock"
    assert second.result_summary == "Gadget: 50 units in stock"
    for entry in (first, second):
        assert entry.confidence == 1.0
        assert entry.action == GuardianAction.allow
        assert entry.tool_call_id == "tc-1"
        assert entry.diff_preview is None

    assert call.is_verification is False
    assert call.action == GuardianAction.allow
    assert call.confidence >= 0.9
    assert call.result_summary == ""
    assert call.diff_preview is not None
    assert call.diff_preview.after["item_0"] == "Widget: 10 × 100 ₽"
    assert call.diff_preview.after["customer"] == "ACME Corp"


@pytest.mark.asyncio
async def test_verification_reads_use_synthetic_context(tool_provider, stock_tool) -> None:
    await _pipeline(tool_provider).process_tool(_invoice_call(), "user-42")

    assert len(stock_tool.calls) == 2
    for args, ctx in stock_tool.calls:
        assert ctx.tool_call_id == "verification"
        assert ctx.user_id == "user-42"
        assert ctx.messages == []
    assert [args for args, _ in stock_tool.calls] == [{"product_name": "Widget"}, {"product_name": "Gadget"}]


@pytest.mark.asyncio
async def test_read_only_tool_has_no_verification(tool_provider, stock_tool) -> None:
    call = ToolCall(tool_call_id="tc-2", tool_name="get_stock", args={"product_name": "Widget"})
    result = await _pipeline(tool_provider).process_tool(call, "user-1")

    assert len(result) == 1
    assert result[0].action == GuardianAction.allow
    assert result[0].confidence == 1.0
    assert result[0].diff_preview is not None
    assert stock_tool.calls == []


@pytest.mark.asyncio
async def test_unknown_tool_passes_with_lower_confidence(tool_provider) -> None:
    call = ToolCall(tool_call_id="tc-3", tool_name="frobnicate", args={"a": 1})
    result = await _pipeline(tool_provider).process_tool(call, "user-1")

    assert len(result) == 1
    assert result[0].action == GuardianAction.allow
    assert result[0].confidence < 1.0
    assert result[0].diff_preview is None


@pytest.mark.asyncio
async def test_rule_rejection_is_reported_on_the_call(tool_provider, rule_factory) -> None:
    rule = rule_factory(
        {"tool": "create_invoice", "field": "quantity", "operator": ">", "value": 5},
        message="Quantity limit exceeded",
    )
    result = await _pipeline(tool_provider).process_tool(_invoice_call(), "user-1", rules=[rule])

    call = result[-1]
    assert call.action == GuardianAction.reject
    assert call.message == "Quantity limit exceeded"
    assert call.confidence < 0.5
    assert all(p.is_verification for p in result[:-1])


@pytest.mark.asyncio
async def test_delete_document_requires_confirmation(tool_provider, document_tool) -> None:
    call = ToolCall(
        tool_call_id="tc-4",
        tool_name="delete_document",
        args={"document_id": "doc-456", "document_type": "Invoice"},
    )
    verification, processed = await _pipeline(tool_provider).process_tool(call, "user-1")

    assert verification.tool_name == "get_document"
    assert verification.result_summary == '{"id": "doc-456", "status": "posted"}'
    assert processed.action == GuardianAction.require_confirmation
    assert processed.message == "Deleting Invoice 'doc-456' cannot be undone"
    assert processed.diff_preview is not None
    assert processed.diff_preview.after["status"] == "DELETED"


@pytest.mark.asyncio
async def test_missing_verification_tool(tool_factory) -> None:
    registry = ToolRegistry()
    registry.register(tool_factory(name="get_stock"))
    provider = StaticToolRegistryProvider(registry=registry)
    call = ToolCall(tool_call_id="tc-5", tool_name="delete_document", args={"document_id": "doc-1"})

    verification, processed = await _pipeline(provider).process_tool(call, "user-1")

    assert verification.is_verification
    assert verification.result_summary == "Verification failed: tool 'get_document' not found or not executable"
    assert verification.confidence == 1.0
    assert processed.tool_name == "delete_document"


@pytest.mark.asyncio
async def test_verification_tool_exception(tool_factory) -> None:
    registry = ToolRegistry()
    registry.register(tool_factory(name="get_stock", raises=RuntimeError("ERP down")))
    provider = StaticToolRegistryProvider(registry=registry)

    result = await _pipeline(provider).process_tool(_invoice_call(), "user-1")

    assert [p.result_summary for p in result[:2]] == ["Verification failed: ERP down"] * 2
    assert result[-1].tool_name == "create_invoice"
    assert result[-1].action == GuardianAction.allow


@pytest.mark.asyncio
async def test_unsuccessful_tool_result(tool_factory) -> None:
    registry = ToolRegistry()
    registry.register(tool_factory(name="get_stock", output=ToolResult(ok=False, output="no such product")))
    provider = StaticToolRegistryProvider(registry=registry)

    result = await _pipeline(provider).process_tool(_invoice_call(), "user-1")

    assert result[0].result_summary == "Verification failed: get_stock: no such product"


@pytest.mark.asyncio
async def test_successful_tool_result_is_unwrapped(tool_factory) -> None:
    registry = ToolRegistry()
    registry.register(tool_factory(name="get_stock", output=ToolResult(ok=True, output={"qty": 50})))
    provider = StaticToolRegistryProvider(registry=registry)

    result = await _pipeline(provider).process_tool(_invoice_call(), "user-1")

    assert result[0].result_summary == '{"qty": 50}'


@pytest.mark.asyncio
async def test_verification_timeout() -> None:
    registry = ToolRegistry()
    registry.register(SlowTool(name="get_stock", delay=1.0))
    provider = StaticToolRegistryProvider(registry=registry)
    pipeline = _pipeline(provider, verification_timeout_seconds=0.01)

    result = await pipeline.process_tool(_invoice_call(), "user-1")

    assert result[0].result_summary == "Verification failed: get_stock timed out"
    assert result[-1].is_verification is False


@pytest.mark.asyncio
async def test_provider_failure_marks_every_read() -> None:
    result = await _pipeline(FailingProvider()).process_tool(_invoice_call(), "user-1")

    assert len(result) == 3
    for entry in result[:2]:
        assert entry.result_summary == "Verification failed: could not load tools: ERP unreachable"
        assert entry.is_verification
    assert result[-1].action == GuardianAction.allow


@pytest.mark.asyncio
async def test_batch_preserves_input_order(tool_provider) -> None:
    calls = [
        _invoice_call("tc-a"),
        ToolCall(tool_call_id="tc-b", tool_name="get_stock", args={"product_name": "Widget"}),
        ToolCall(tool_call_id="tc-c", tool_name="update_product", args={"product_id": "p-1", "price": 150}),
    ]
    result = await _pipeline(tool_provider).process_tools(calls, "user-1")

    assert [(p.tool_name, p.is_verification) for p in result] == [
        ("get_stock", True),
        ("get_stock", True),
        ("create_invoice", False),
        ("get_stock", False),
        ("get_products", True),
        ("update_product", False),
    ]
    assert [p.tool_call_id for p in result] == ["tc-a", "tc-a", "tc-a", "tc-b", "tc-c", "tc-c"]


@pytest.mark.asyncio
async def test_empty_batch(tool_provider) -> None:
    assert await _pipeline(tool_provider).process_tools([], "user-1") == []


@pytest.mark.asyncio
async def test_accepts_plain_mappings(tool_provider) -> None:
    result = await _pipeline(tool_provider).process_tools(
        [
            {"toolCallId": "tc-1", "toolName": "get_stock", "args": {"product_name": "Widget"}},
            {"tool_call_id": "tc-2", "tool_name": "get_products", "args": {}},
        ],
        "user-1",
    )
    assert [p.tool_call_id for p in result] == ["tc-1", "tc-2"]


@pytest.mark.asyncio
async def test_execute_tool_skips_verification(tool_provider, stock_tool) -> None:
    processed = await _pipeline(tool_provider).execute_tool(_invoice_call(), "user-1")

    assert processed.tool_name == "create_invoice"
    assert processed.is_verification is False
    assert stock_tool.calls == []


@pytest.mark.asyncio
async def test_backend_currency_reaches_preview(tool_provider) -> None:
    result = await _pipeline(tool_provider).process_tool(
        _invoice_call(), "user-1", backend_config=BackendConfig(provider="demo", currency="USD")
    )
    preview = result[-1].diff_preview
    assert preview is not None
    assert preview.after["item_1"] == "Gadget: 5 × 200 USD"


@pytest.mark.asyncio
async def test_result_summary_lowers_confidence(tool_provider) -> None:
    call = ToolCall(
        tool_call_id="tc-6",
        tool_name="get_stock",
        args={"product_name": "Widget"},
        result_summary="Product not found",
    )
    (processed,) = await _pipeline(tool_provider).process_tool(call, "user-1")

    assert processed.result_summary == "Product not found"
    assert processed.confidence < 1.0


def _wired_pipeline(
    provider: Any,
    planner: Optional[VerificationPlanner] = None,
    previewer: Optional[DiffPreviewer] = None,
) -> VerificationPipeline:
    return VerificationPipeline(
        guardian=build_guardian(config=_settings()),
        scorer=ConfidenceScorer(),
        previewer=previewer or DiffPreviewer(),
        planner=planner or VerificationPlanner(),
        tool_provider=provider,
        verification_timeout=1.0,
    )


def _broken_plan(args: Dict[str, Any]) -> List[VerificationStep]:
    raise RuntimeError("planner bug")


def _broken_preview(call: ToolCall, options: PreviewOptions) -> Optional[DiffPreview]:
    raise RuntimeError("preview bug")


@pytest.mark.asyncio
async def test_raising_planner_does_not_abort_the_batch(tool_provider) -> None:
    planner = VerificationPlanner()
    planner.register("archive_order", _broken_plan)
    calls = [
        ToolCall(tool_call_id="tc-1", tool_name="get_stock", args={"product_name": "Widget"}),
        ToolCall(tool_call_id="tc-2", tool_name="archive_order", args={"order_id": "o-1"}),
    ]

    result = await _wired_pipeline(tool_provider, planner=planner).process_tools(calls, "user-1")

    assert [(p.tool_call_id, p.tool_name, p.is_verification) for p in result] == [
        ("tc-1", "get_stock", False),
        ("tc-2", "archive_order", True),
        ("tc-2", "archive_order", False),
    ]
    failed = result[1]
    assert failed.result_summary == "Verification failed: could not plan verification: planner bug"
    assert failed.confidence == 1.0
    assert failed.action == GuardianAction.allow
    assert result[0].action == GuardianAction.allow


@pytest.mark.asyncio
async def test_raising_preview_leaves_call_without_preview(tool_provider) -> None:
    previewer = DiffPreviewer()
    previewer.register("update_product", _broken_preview)
    calls = [
        ToolCall(tool_call_id="tc-1", tool_name="update_product", args={"product_id": "p-1", "price": 150}),
        ToolCall(tool_call_id="tc-2", tool_name="get_stock", args={"product_name": "Widget"}),
    ]

    result = await _wired_pipeline(tool_provider, previewer=previewer).process_tools(calls, "user-1")

    assert [p.tool_name for p in result] == ["get_products", "update_product", "get_stock"]
    assert result[1].diff_preview is None
    assert result[1].action == GuardianAction.allow
    assert result[2].diff_preview is not None


@pytest.mark.asyncio
async def test_zero_product_id_is_verified_and_previewed(tool_provider, products_tool) -> None:
    call = ToolCall(tool_call_id="tc-1", tool_name="update_product", args={"product_id": 0, "price": 150})

    verification, processed = await _pipeline(tool_provider).process_tool(call, "user-1")

    assert verification.tool_name == "get_products"
    assert verification.args == {"product_id": 0}
    assert products_tool.calls[0][0] == {"product_id": 0}
    assert processed.diff_preview == DiffPreview(before={"price": "(existing value)"}, after={"price": 150})
