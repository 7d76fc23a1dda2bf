from __future__ import annotations

"""Verification pipeline: the entry point of the guardrail.

``VerificationPipeline`` turns a batch of proposed tool calls into the
``ProcessedToolCall`` list consumed by the chat layer. For each call the step
order is fixed:

1. **Verification** (mutating tools only): plan the read-only lookups with
   the ``VerificationPlanner``, execute them through the tool registry and
   emit one entry per lookup (``is_verification=True``, confidence 1.0).
2. **Guardian**: rules + semantic checks decide the call's ``action``.
3. **Confidence**: heuristic score, informed by the guardian verdict.
4. **Diff preview**: before/after projection of the call's effect.

Verification lookups of one call run concurrently, and so do the calls of a
batch; output order always follows input order. A failing lookup (missing
tool, non-ok result, exception or timeout) becomes a ``"Verification failed:
..."`` summary and never aborts the call or its siblings. So does a planner
that raises. A preview function that raises leaves the call without a
preview. Nothing is retried.
"""

import asyncio
import inspect
import json
import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..errors import VerificationError
from ..policy.guardian import Guardian
from ..preview.diff import DiffPreviewer
from ..schemas.domain import BackendConfig, GuardianAction, ProcessedToolCall, Rule, ToolCall
from ..scoring.confidence import ConfidenceScorer
from ..tools.base import Tool, ToolExecutionContext, ToolResult
from ..tools.registry import ToolRegistryProvider, require_tool
from ..utils import to_text
from .planner import VerificationPlanner, VerificationStep

logger = logging.getLogger(__name__)

VERIFICATION_FAILED_PREFIX = "Verification failed: "
VERIFICATION_TOOL_CALL_ID = "verification"

ToolCallLike = Union[ToolCall, Mapping[str, Any]]


def _as_tool_call(tool_call: ToolCallLike) -> ToolCall:
    if isinstance(tool_call, ToolCall):
        return tool_call
    return ToolCall.model_validate(tool_call)


def _summarize_output(tool_name: str, output: Any) -> str:
    if isinstance(output, ToolResult):
        if not output.ok:
            raise VerificationError(tool_name, to_text(output.output))
        output = output.output
    if isinstance(output, str):
        return output
    return json.dumps(output, ensure_ascii=False, default=str)


class VerificationPipeline:
    """Run proposed tool calls through verification, guardian, scoring and preview.

    The pipeline holds direct references to its collaborators and no
    per-request state: rules and back-end settings are passed on every call.
    """

    def __init__(
        self,
        *,
        guardian: Guardian,
        scorer: ConfidenceScorer,
        previewer: DiffPreviewer,
        planner: VerificationPlanner,
        tool_provider: ToolRegistryProvider,
        verification_timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the VerificationPipeline.

        Args:
            guardian: Decides the action of each proposed call.
            scorer: Computes the confidence of each proposed call.
            previewer: Builds before/after previews.
            planner: Plans CoVe verification reads for mutating tools.
            tool_provider: Resolves the executable tools for a user.
            verification_timeout: Seconds allowed per verification read; ``None`` or 0 disables the limit.
        """
        self._guardian = guardian
        self._scorer = scorer
        self._previewer = previewer
        self._planner = planner
        self._tools = tool_provider
        self._timeout = verification_timeout or None

    async def process_tools(
        self,
        tool_calls: Sequence[ToolCallLike],
        user_id: str,
        rules: Optional[Sequence[Rule]] = None,
        backend_config: Optional[BackendConfig] = None,
    ) -> List[ProcessedToolCall]:
        """Process a batch; per-call results are concatenated in input order."""
        batches = await asyncio.gather(
            *(self.process_tool(call, user_id, rules=rules, backend_config=backend_config) for call in tool_calls)
        )
        return [processed for batch in batches for processed in batch]

    async def process_tool(
        self,
        tool_call: ToolCallLike,
        user_id: str,
        rules: Optional[Sequence[Rule]] = None,
        backend_config: Optional[BackendConfig] = None,
    ) -> List[ProcessedToolCall]:
        """
        Process one call: its verification reads first, then the call itself.

        Returns:
            The verification entries (possibly none) followed by the entry of the call.
        """
        call = _as_tool_call(tool_call)
        result: List[ProcessedToolCall] = []

        if self._planner.needs_verification(call.tool_name):
            try:
                steps = self._planner.get_verification_tools(call.tool_name, dict(call.args))
            except Exception as e:
                logger.exception(f"Planning verification for tool {call.tool_name} ({call.tool_call_id}) failed")
                result.append(
                    ProcessedToolCall(
                        tool_call_id=call.tool_call_id,
                        tool_name=call.tool_name,
                        result_summary=f"{VERIFICATION_FAILED_PREFIX}could not plan verification: {e}",
                        confidence=1.0,
                        action=GuardianAction.allow,
                        is_verification=True,
                    )
                )
            else:
                result.extend(await self._verify(call, steps, user_id, backend_config))

        result.append(await self.execute_tool(call, user_id, rules=rules, backend_config=backend_config))
        return result

    async def execute_tool(
        self,
        tool_call: ToolCallLike,
        user_id: str,
        rules: Optional[Sequence[Rule]] = None,
        backend_config: Optional[BackendConfig] = None,
    ) -> ProcessedToolCall:
        """
        Decide, score and preview one call without running verification reads.

        The ``action`` of the returned entry is always the guardian's verdict.
        """
        call = _as_tool_call(tool_call)
        decision = await self._guardian.check(user_id, call.tool_name, dict(call.args), rules)
        confidence = self._scorer.calculate_confidence(
            call.tool_name,
            call.args,
            call.result_summary,
            guardian_action=decision.action,
        )
        try:
            preview = self._previewer.generate_diff_preview(call, backend_config)
        except Exception:
            logger.exception(f"Diff preview for tool {call.tool_name} ({call.tool_call_id}) failed")
            preview = None

        logger.info(
            f"Processed tool {call.tool_name} ({call.tool_call_id}): "
            f"action={decision.action.value}, confidence={confidence}"
        )
        return ProcessedToolCall(
            tool_call_id=call.tool_call_id,
            tool_name=call.tool_name,
            args=dict(call.args),
            result_summary=call.result_summary or "",
            confidence=confidence,
            action=decision.action,
            message=decision.message,
            diff_preview=preview,
            is_verification=False,
        )

    async def _verify(
        self,
        call: ToolCall,
        steps: List[VerificationStep],
        user_id: str,
        backend_config: Optional[BackendConfig],
    ) -> List[ProcessedToolCall]:
        if not steps:
            return []

        try:
            tools = await self._tools.get_tools(user_id, backend_config)
        except Exception as e:
            logger.error(f"Could not resolve tools for user {user_id}: {e}")
            summaries = [f"{VERIFICATION_FAILED_PREFIX}could not load tools: {e}"] * len(steps)
        else:
            summaries = list(await asyncio.gather(*(self._execute_step(tools, step, user_id) for step in steps)))

        return [
            ProcessedToolCall(
                tool_call_id=call.tool_call_id,
                tool_name=step.tool_name,
                args=dict(step.args),
                result_summary=summary,
                confidence=1.0,
                action=GuardianAction.allow,
                is_verification=True,
            )
            for step, summary in zip(steps, summaries)
        ]

    async def _execute_step(self, tools: Mapping[str, Tool], step: VerificationStep, user_id: str) -> str:
        try:
            tool = require_tool(tools, step.tool_name)
            ctx = ToolExecutionContext(tool_call_id=VERIFICATION_TOOL_CALL_ID, user_id=user_id)
            output = tool.execute(dict(step.args), ctx)
            if inspect.isawaitable(output):
                output = await asyncio.wait_for(output, timeout=self._timeout)
            return _summarize_output(step.tool_name, output)
        except asyncio.TimeoutError:
            logger.error(f"Verification {step.tool_name} timed out (limit={self._timeout}s)")
            return f"{VERIFICATION_FAILED_PREFIX}{step.tool_name} timed out"
        except Exception as e:
            logger.error(f"Verification {step.tool_name} failed: {e}")
            return f"{VERIFICATION_FAILED_PREFIX}{e}"
