"""
Rule Set Validation - Sanity checks for rule sets.

Validates that:
1. Placing rules never carry a split policy (splitting has no meaning
   when no coins are taken)
2. Take lists are non-empty and only contain positive amounts
3. Suspicious but legal configurations are flagged as warnings
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from .rules import NimRule, RuleSet, Split, TakeKind, as_rule_set


class RuleSetValidationError(ValueError):
    """Raised when a rule set is unusable."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Rule set validation failed with {len(errors)} error(s): " + "; ".join(errors)
        )


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_rule_set(rules: RuleSet | Iterable[NimRule]) -> ValidationResult:
    """
    Validate a complete rule set.

    Returns ValidationResult with errors and warnings.
    """
    rules = as_rule_set(rules)
    errors: list[str] = []
    warnings: list[str] = []

    for index, rule in enumerate(rules):
        errors.extend(f"Rule {index}: {e}" for e in _validate_rule(rule))
        warnings.extend(f"Rule {index}: {w}" for w in _rule_warnings(rule))

    if not rules:
        warnings.append("Rule set is empty - every position is terminal")

    seen: set[NimRule] = set()
    for index, rule in enumerate(rules):
        if rule in seen:
            warnings.append(f"Rule {index} duplicates an earlier rule")
        seen.add(rule)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def require_valid_rule_set(rules: RuleSet | Iterable[NimRule]) -> RuleSet:
    """Return the rule set, raising RuleSetValidationError if it has errors."""
    rules = as_rule_set(rules)
    result = validate_rule_set(rules)
    if not result.valid:
        raise RuleSetValidationError(result.errors)
    return rules


def check_place_rule(rule: NimRule):
    """Raise if a placing rule carries a split policy."""
    if rule.take.kind == TakeKind.PLACE and rule.split != Split.NEVER:
        raise RuleSetValidationError(
            [f"Placing coins cannot be combined with split '{rule.split.value}'"]
        )


def _validate_rule(rule: NimRule) -> list[str]:
    """Validate a single rule."""
    errors = []

    if rule.take.kind == TakeKind.PLACE:
        if rule.split != Split.NEVER:
            errors.append(
                f"Placing coins cannot be combined with split '{rule.split.value}'"
            )
        if rule.take.amounts:
            errors.append("Place rule must not list amounts")

    elif rule.take.kind == TakeKind.LIST:
        if not rule.take.amounts:
            errors.append("Take list is empty")
        for amount in rule.take.amounts:
            if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
                errors.append(f"Take amount {amount!r} is not a positive integer")

    elif rule.take.kind == TakeKind.ANY:
        if rule.take.amounts:
            errors.append("Any-take rule must not list amounts")

    return errors


def _rule_warnings(rule: NimRule) -> list[str]:
    """Warnings for legal but suspicious rules."""
    warnings = []
    amounts = rule.take.amounts
    if len(set(amounts)) != len(amounts):
        warnings.append("Take list contains duplicate amounts")
    return warnings
