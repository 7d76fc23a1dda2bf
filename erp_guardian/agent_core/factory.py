from __future__ import annotations

"""Convenience factories for wiring the guardrail.

This module contains small helpers to build a ``Guardian`` and a
``VerificationPipeline`` with explicit constructor wiring. Defaults come
from ``erp_guardian.core.config.settings``; every value can be overridden so
tests never depend on the environment.
"""

from typing import Optional

from ..core.config import Settings, settings as default_settings
from .policy.guardian import Guardian
from .policy.rules import RuleEvaluator
from .policy.semantic import RecordLookup, SemanticValidator
from .preview.diff import DiffPreviewer
from .scoring.confidence import ConfidenceScorer, ScoringWeights
from .tools.registry import ToolRegistryProvider
from .verification.pipeline import VerificationPipeline
from .verification.planner import VerificationPlanner


def build_guardian(
    *,
    record_lookup: Optional[RecordLookup] = None,
    config: Optional[Settings] = None,
) -> Guardian:
    """Construct a ``Guardian`` with the built-in semantic checks."""
    cfg = config or default_settings
    validator = SemanticValidator(
        record_lookup=record_lookup,
        large_invoice_threshold=cfg.large_invoice_threshold,
    )
    return Guardian(validator=validator, evaluator=RuleEvaluator())


def build_pipeline(
    *,
    tool_provider: ToolRegistryProvider,
    record_lookup: Optional[RecordLookup] = None,
    weights: Optional[ScoringWeights] = None,
    config: Optional[Settings] = None,
) -> VerificationPipeline:
    """Construct a ``VerificationPipeline`` from its default collaborators.

    Args:
        tool_provider: Resolves the tools used for verification reads.
        record_lookup: Optional live lookup used by the semantic checks.
        weights: Confidence weights; defaults to ``ScoringWeights()``.
        config: Settings overriding the process-wide ``settings``.
    """
    cfg = config or default_settings
    return VerificationPipeline(
        guardian=build_guardian(record_lookup=record_lookup, config=cfg),
        scorer=ConfidenceScorer(weights),
        previewer=DiffPreviewer(currency=cfg.currency),
        planner=VerificationPlanner(),
        tool_provider=tool_provider,
        verification_timeout=cfg.verification_timeout_seconds,
    )
