from __future__ import annotations

"""Guardian: the single allow/reject/warn authority for a tool call.

``Guardian.check`` merges caller rules and built-in semantic checks. The
first applicable step wins:

1. A rule that rejects the call -> ``reject``.
2. A failing semantic check -> ``reject``.
3. A semantic warning -> ``require_confirmation``.
4. A rule that warns or asks for confirmation -> that action.
5. Otherwise -> ``allow``.

Hard rejections from either source dominate. Semantic warnings rank above
rule warnings.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from ..schemas.domain import GuardianAction, Rule
from .models import GuardianDecision
from .rules import RuleEvaluator
from .semantic import SemanticValidator

logger = logging.getLogger(__name__)


class Guardian:
    """Decide whether a proposed tool call may run.

    The guardian holds no per-user state: rules are passed to every ``check``.
    """

    def __init__(self, *, validator: SemanticValidator, evaluator: Optional[RuleEvaluator] = None) -> None:
        self._validator = validator
        self._evaluator = evaluator or RuleEvaluator()

    async def check(
        self,
        user_id: str,
        tool_name: str,
        args: Dict[str, Any],
        rules: Optional[Sequence[Rule]] = None,
    ) -> GuardianDecision:
        """
        Check a tool call before execution.

        Args:
            user_id: The user on whose behalf the call is proposed.
            tool_name: The proposed tool.
            args: The proposed arguments.
            rules: Caller rules sent with the request.

        Returns:
            The merged ``GuardianDecision``.
        """
        rule_result = self._evaluator.evaluate(rules or [], tool_name, args)
        if not rule_result.allowed:
            logger.info(f"Tool {tool_name} rejected by rule {rule_result.rule_id} for user {user_id}")
            return GuardianDecision(
                allowed=False,
                action=GuardianAction.reject,
                message=rule_result.message,
                rule_id=rule_result.rule_id,
            )

        semantic = await self._validator.validate(tool_name, args)
        if not semantic.valid:
            logger.info(f"Tool {tool_name} rejected by semantic validation for user {user_id}: {semantic.message}")
            return GuardianDecision(allowed=False, action=GuardianAction.reject, message=semantic.message)

        if semantic.is_warning and semantic.message:
            return GuardianDecision(
                allowed=True,
                action=GuardianAction.require_confirmation,
                message=semantic.message,
            )

        if rule_result.action in (GuardianAction.warn, GuardianAction.require_confirmation):
            return GuardianDecision(
                allowed=True,
                action=rule_result.action,
                message=rule_result.message,
                rule_id=rule_result.rule_id,
            )

        return GuardianDecision(allowed=True, action=GuardianAction.allow)
