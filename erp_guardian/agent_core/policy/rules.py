from __future__ import annotations

"""Stateless evaluation of caller-supplied rules.

Rules arrive with every request (the client keeps them on-device) and are
evaluated in ``priority`` order, lowest first, ties keeping arrival order.
The first rule whose condition matches decides the verdict; later rules are
not looked at.

A condition applies to a call when its ``tool`` (if set) names the called
tool and its ``field`` resolves to at least one value in the arguments:

- a top-level argument key,
- else a dotted path through nested objects (``customer.name``),
- else the key on the items of any list argument (``quantity`` on invoice
  lines); the rule matches if any item matches.

Conditions without a ``field`` never match. A condition that cannot be
parsed is logged and skipped so a broken rule never blocks unrelated calls.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..errors import RuleConditionError
from ..schemas.domain import GuardianAction, Rule
from ..utils import is_number, to_text
from .models import RuleCondition, RuleEvaluation

logger = logging.getLogger(__name__)


def parse_condition(rule: Rule) -> RuleCondition:
    """
    Parse the JSON condition of a rule.

    Raises:
        RuleConditionError: If the condition is not valid JSON or not a JSON object.
    """
    try:
        return RuleCondition.model_validate_json(rule.condition)
    except ValidationError as e:
        raise RuleConditionError(rule.id, str(e)) from e


def _resolve_field(args: Dict[str, Any], field: str) -> List[Any]:
    if field in args:
        return [args[field]]

    if "." in field:
        node: Any = args
        for part in field.split("."):
            if not isinstance(node, dict) or part not in node:
                node = None
                break
            node = node[part]
        else:
            return [node]

    found: List[Any] = []
    for value in args.values():
        if isinstance(value, list):
            found.extend(item[field] for item in value if isinstance(item, dict) and field in item)
    return found


def _strict_equals(actual: Any, expected: Any) -> bool:
    if is_number(actual) and is_number(expected):
        return actual == expected
    return type(actual) is type(expected) and actual == expected


def _compare(operator: Optional[str], actual: Any, expected: Any) -> bool:
    if operator == "<":
        return is_number(actual) and is_number(expected) and actual < expected
    if operator == ">":
        return is_number(actual) and is_number(expected) and actual > expected
    if operator == "==":
        return _strict_equals(actual, expected)
    if operator == "!=":
        return not _strict_equals(actual, expected)
    if operator == "contains":
        return to_text(expected) in to_text(actual)
    return False


class RuleEvaluator:
    """Evaluate an ordered set of rules against one tool call."""

    def evaluate(self, rules: Sequence[Rule], tool_name: str, args: Dict[str, Any]) -> RuleEvaluation:
        """
        Find the first rule matching the call.

        Args:
            rules: Caller rules in arrival order. Disabled rules are ignored.
            tool_name: The proposed tool.
            args: The proposed arguments.

        Returns:
            The verdict of the first matching rule, or an ``allow`` evaluation.
        """
        ordered = sorted((r for r in rules if r.enabled), key=lambda r: r.priority)
        for rule in ordered:
            try:
                condition = parse_condition(rule)
            except RuleConditionError as e:
                logger.error(f"Error parsing rule condition: {e}")
                continue

            if condition.tool and condition.tool != tool_name:
                continue
            if not condition.field:
                continue

            values = _resolve_field(args, condition.field)
            if not any(_compare(condition.operator, v, condition.value) for v in values):
                continue

            logger.warning(f"Rule violation: {rule.name} for tool {tool_name}")
            return RuleEvaluation(
                allowed=rule.action != GuardianAction.reject,
                action=rule.action,
                message=rule.message or f"Rule violated: {rule.name}",
                rule_id=rule.id,
            )

        return RuleEvaluation(allowed=True, action=GuardianAction.allow)
