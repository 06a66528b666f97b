"""Rule schema - Nim rule definitions, validation and JSON interchange."""

from .rules import NimRule, RuleSet, Split, TakeKind, TakeSize, as_rule_set, make_rule_set
from .validation import (
    RuleSetValidationError,
    ValidationResult,
    require_valid_rule_set,
    validate_rule_set,
)
from .serialization import NimRuleModel, TakeListModel, rule_set_from_json, rule_set_to_json

__all__ = [
    "NimRule",
    "RuleSet",
    "Split",
    "TakeKind",
    "TakeSize",
    "as_rule_set",
    "make_rule_set",
    "RuleSetValidationError",
    "ValidationResult",
    "require_valid_rule_set",
    "validate_rule_set",
    "NimRuleModel",
    "TakeListModel",
    "rule_set_from_json",
    "rule_set_to_json",
]
