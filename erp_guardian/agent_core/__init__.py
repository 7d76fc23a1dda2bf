"""Guardrail core: schemas, policy, verification, scoring and previews.

Design overview
---------------

Every tool call proposed by the agent goes through one ordered pipeline:

- ``verification``: CoVe reads for mutating tools, executed through the
  tool registry contract in ``tools``.
- ``policy``: caller rules and built-in semantic checks merged by the
  ``Guardian`` into a single verdict.
- ``scoring``: heuristic confidence of the proposed call.
- ``preview``: before/after diff shown to the user before confirming.

Typical usage
-------------

Build a pipeline with ``factory.build_pipeline`` and pass each batch of tool
calls, together with the client's rules, to
``VerificationPipeline.process_tools``.
"""

from .factory import build_guardian, build_pipeline
from .policy import Guardian, GuardianDecision, RuleEvaluator, SemanticValidator
from .preview import DiffPreviewer
from .schemas.domain import (
    BackendConfig,
    DiffPreview,
    GuardianAction,
    ProcessedToolCall,
    Rule,
    ToolCall,
)
from .scoring import ConfidenceScorer
from .verification import VerificationPipeline, VerificationPlanner

__all__ = [
    "BackendConfig",
    "DiffPreview",
    "GuardianAction",
    "ProcessedToolCall",
    "Rule",
    "ToolCall",
    "Guardian",
    "GuardianDecision",
    "RuleEvaluator",
    "SemanticValidator",
    "ConfidenceScorer",
    "DiffPreviewer",
    "VerificationPlanner",
    "VerificationPipeline",
    # Wiring
    "build_guardian",
    "build_pipeline",
]
