"""Policy subsystem: caller rules, built-in checks and the guardian.

The policy layer provides *runtime* decisions for proposed tool calls. It is
separate from prompting so that the LLM never decides on its own whether a
mutation is safe.

Components
----------

- ``RuleEvaluator``: evaluates caller-supplied declarative rules.
- ``SemanticValidator``: built-in, tool-specific business checks.
- ``Guardian``: merges both into one ``GuardianDecision``.
"""

from .guardian import Guardian
from .models import (
    GuardianDecision,
    RuleCondition,
    RuleEvaluation,
    SemanticLevel,
    SemanticResult,
)
from .rules import RuleEvaluator
from .semantic import RecordLookup, SemanticValidator

__all__ = [
    "Guardian",
    "GuardianDecision",
    "RecordLookup",
    "RuleCondition",
    "RuleEvaluation",
    "RuleEvaluator",
    "SemanticLevel",
    "SemanticResult",
    "SemanticValidator",
]
