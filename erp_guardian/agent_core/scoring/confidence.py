from __future__ import annotations

"""Heuristic confidence scoring for proposed tool calls.

The score is a deterministic function of the call: it starts from a base
that depends on the tool's risk kind and only ever subtracts penalties for
risk signals, so adding a risk signal can never raise it. A clean ``allow``
with fully specified arguments stays at or near 1.0.

Verification reads are not scored here; the pipeline fixes them at 1.0.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import Field

from ..schemas.base import BaseSchema
from ..schemas.domain import GuardianAction
from ..tools.catalog import ToolRiskKind, required_args, risk_kind

logger = logging.getLogger(__name__)

_FAILURE_MARKERS = ("error", "failed", "not found")


class ScoringWeights(BaseSchema):
    """Tunable weights of the confidence heuristic."""

    base_by_kind: Dict[ToolRiskKind, float] = Field(
        default_factory=lambda: {
            ToolRiskKind.read: 1.0,
            ToolRiskKind.write: 0.95,
            ToolRiskKind.high: 0.9,
        }
    )
    unknown_tool_base: float = Field(default=0.8, ge=0.0, le=1.0)

    empty_args_penalty: float = Field(default=0.3, ge=0.0)
    empty_read_args_penalty: float = Field(default=0.1, ge=0.0)
    missing_arg_penalty: float = Field(default=0.15, ge=0.0)
    malformed_args_penalty: float = Field(default=0.3, ge=0.0)
    error_result_penalty: float = Field(default=0.2, ge=0.0)

    action_penalties: Dict[GuardianAction, float] = Field(
        default_factory=lambda: {
            GuardianAction.allow: 0.0,
            GuardianAction.warn: 0.1,
            GuardianAction.require_confirmation: 0.25,
            GuardianAction.reject: 0.6,
        }
    )


def _is_malformed(args: Any) -> bool:
    if not isinstance(args, dict):
        return True
    try:
        json.dumps(args, allow_nan=False)
    except (TypeError, ValueError):
        return True
    return False


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


class ConfidenceScorer:
    """Compute a confidence in [0, 1] for a proposed tool call."""

    def __init__(self, weights: Optional[ScoringWeights] = None) -> None:
        self._w = weights or ScoringWeights()

    @property
    def weights(self) -> ScoringWeights:
        return self._w

    def calculate_confidence(
        self,
        tool_name: str,
        args: Any,
        result_summary: Optional[str] = "",
        guardian_action: Optional[GuardianAction] = None,
    ) -> float:
        """
        Score a proposed call.

        Args:
            tool_name: The proposed tool.
            args: The proposed arguments (anything but a JSON object is malformed).
            result_summary: Text produced for the call so far, if any.
            guardian_action: The guardian verdict, when already known.

        Returns:
            The confidence, clamped to [0, 1] and rounded to two decimals.
        """
        w = self._w
        kind = risk_kind(tool_name)
        score = w.base_by_kind.get(kind, w.unknown_tool_base) if kind else w.unknown_tool_base

        required = required_args(tool_name)
        if _is_malformed(args):
            score -= w.malformed_args_penalty
        if not isinstance(args, dict):
            args = {}
        elif not args:
            if kind == ToolRiskKind.read and not required:
                score -= w.empty_read_args_penalty
            else:
                score -= w.empty_args_penalty
        missing = [name for name in required if _is_blank(args.get(name))]
        score -= w.missing_arg_penalty * len(missing)

        summary = (result_summary or "").lower()
        if any(marker in summary for marker in _FAILURE_MARKERS):
            score -= w.error_result_penalty

        if guardian_action is not None:
            score -= w.action_penalties.get(guardian_action, 0.0)

        confidence = round(min(1.0, max(0.0, score)), 2)
        logger.debug(f"Confidence for {tool_name}: {confidence} (missing={missing}, action={guardian_action})")
        return confidence
