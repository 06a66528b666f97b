"""
Rule Set Serialization - JSON interchange format for rule sets.

A rule set is a JSON array of rule objects:

    [
        {"take": {"List": [1, 2, 3]}, "split": "Never"},
        {"take": "Any", "split": "Optional"},
        {"take": "Place", "split": "Never"}
    ]

The take size is either the bare string "Any"/"Place" or an object with
a single "List" key. Pydantic models define and validate the format.
"""

from __future__ import annotations
import json
from typing import Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, TypeAdapter, ValidationError

from .rules import NimRule, RuleSet, Split, TakeKind, TakeSize, as_rule_set
from .validation import RuleSetValidationError, require_valid_rule_set


class TakeListModel(BaseModel):
    """An explicit list of amounts, serialized as {"List": [...]}."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    amounts: list[PositiveInt] = Field(alias="List", min_length=1)


class NimRuleModel(BaseModel):
    """A single rule in its JSON form."""
    model_config = ConfigDict(extra="forbid")

    take: Union[Literal["Any", "Place"], TakeListModel]
    split: Literal["Never", "Optional", "Always"] = "Never"

    @classmethod
    def from_rule(cls, rule: NimRule) -> NimRuleModel:
        if rule.take.kind == TakeKind.LIST:
            take = TakeListModel(amounts=list(rule.take.amounts))
        else:
            take = rule.take.kind.value
        return cls(take=take, split=rule.split.value)

    def to_rule(self) -> NimRule:
        if isinstance(self.take, TakeListModel):
            take = TakeSize.list(self.take.amounts)
        elif self.take == "Any":
            take = TakeSize.any()
        else:
            take = TakeSize.place()
        return NimRule(take=take, split=Split(self.split))


_rule_list_adapter = TypeAdapter(list[NimRuleModel])


def rule_set_to_models(rules: RuleSet | Iterable[NimRule]) -> list[NimRuleModel]:
    return [NimRuleModel.from_rule(rule) for rule in as_rule_set(rules)]


def rule_set_from_models(models: Iterable[NimRuleModel]) -> RuleSet:
    """Convert parsed models into a validated RuleSet."""
    return require_valid_rule_set(RuleSet(tuple(m.to_rule() for m in models)))


def rule_set_to_json(rules: RuleSet | Iterable[NimRule], pretty: bool = False) -> str:
    """Serialize a rule set to its JSON interchange form."""
    data = _rule_list_adapter.dump_python(rule_set_to_models(rules), by_alias=True)
    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data, separators=(",", ":"))


def rule_set_from_json(text: str | bytes) -> RuleSet:
    """
    Parse a rule set from JSON.

    Raises RuleSetValidationError for malformed documents and for rule
    sets that fail validation.
    """
    try:
        models = _rule_list_adapter.validate_json(text)
    except ValidationError as e:
        raise RuleSetValidationError(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        ) from e
    return rule_set_from_models(models)
