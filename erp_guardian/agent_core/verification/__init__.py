"""Chain of Verification planning and the verification pipeline.

The pipeline is the entry point of the guardrail: it takes the tool calls
proposed by the agent and returns ``ProcessedToolCall`` entries carrying the
guardian verdict, a confidence score, a diff preview and, for mutating
tools, the verification reads executed beforehand.
"""

from .pipeline import VERIFICATION_FAILED_PREFIX, VerificationPipeline
from .planner import VerificationPlanner, VerificationStep

__all__ = [
    "VERIFICATION_FAILED_PREFIX",
    "VerificationPipeline",
    "VerificationPlanner",
    "VerificationStep",
]
