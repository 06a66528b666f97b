"""
Rule Model - Value types describing the moves a Nim variant allows.

A rule pairs two independent axes:
1. TakeSize - how many coins a move removes (or places from a pool)
2. Split - whether the remainder must/may/must-not become two stacks

A RuleSet is an ordered, immutable sequence of rules. Order only affects
the order moves are enumerated in; value equality of the whole sequence
is what the nimber cache partitions on.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Sequence


class TakeKind(Enum):
    """Kinds of take sizes."""
    LIST = "List"  # Only the listed amounts
    ANY = "Any"  # Any amount from 1 up to the stack height
    PLACE = "Place"  # Place coins from a pool instead of taking


class Split(Enum):
    """Whether a stack may be split into two non-empty stacks after taking."""
    NEVER = "Never"
    OPTIONAL = "Optional"
    ALWAYS = "Always"


@dataclass(frozen=True)
class TakeSize:
    """
    Number of coins a rule allows to be taken in a single move.

    Use the factories rather than the constructor:
        TakeSize.list([1, 2, 3])
        TakeSize.any()
        TakeSize.place()
    """
    kind: TakeKind
    amounts: tuple[int, ...] = ()

    @classmethod
    def list(cls, amounts: Iterable[int]) -> TakeSize:
        """Factory for an explicit list of amounts."""
        return cls(kind=TakeKind.LIST, amounts=tuple(amounts))

    @classmethod
    def any(cls) -> TakeSize:
        """Factory for taking any amount."""
        return cls(kind=TakeKind.ANY)

    @classmethod
    def place(cls) -> TakeSize:
        """Factory for placing coins from a pool."""
        return cls(kind=TakeKind.PLACE)

    def accepts(self, amount: int) -> bool:
        """Whether a take of `amount` coins matches this take size."""
        if self.kind == TakeKind.LIST:
            return amount in self.amounts
        if self.kind == TakeKind.ANY:
            return amount >= 1
        if self.kind == TakeKind.PLACE:
            return False
        raise AssertionError(f"Unhandled take kind: {self.kind}")

    def __str__(self) -> str:
        if self.kind == TakeKind.LIST:
            return "take " + "|".join(str(a) for a in self.amounts)
        if self.kind == TakeKind.ANY:
            return "take any"
        return "place"


@dataclass(frozen=True)
class NimRule:
    """A single rule: a take size combined with a split policy."""
    take: TakeSize
    split: Split = Split.NEVER

    def __str__(self) -> str:
        return f"{self.take}, split {self.split.value.lower()}"


@dataclass(frozen=True)
class RuleSet:
    """
    An ordered, hashable sequence of NimRules.

    The hash is computed once on construction, so using a RuleSet as a
    dict key stays cheap however many times it is looked up.
    """
    rules: tuple[NimRule, ...] = ()
    _hash: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "_hash", hash(self.rules))

    def __hash__(self) -> int:
        return self._hash

    def __iter__(self) -> Iterator[NimRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __getitem__(self, index: int) -> NimRule:
        return self.rules[index]

    def __bool__(self) -> bool:
        return bool(self.rules)

    @property
    def allows_place(self) -> bool:
        return any(rule.take.kind == TakeKind.PLACE for rule in self.rules)

    def matching_take_rules(self, amount: int) -> list[NimRule]:
        """Rules whose take size accepts a take of `amount` coins."""
        return [rule for rule in self.rules if rule.take.accepts(amount)]


def as_rule_set(rules: RuleSet | Iterable[NimRule]) -> RuleSet:
    """Coerce any iterable of rules into a RuleSet."""
    if isinstance(rules, RuleSet):
        return rules
    return RuleSet(tuple(rules))


def make_rule_set(
    take_split_never: Sequence[int] = (),
    take_split_optional: Sequence[int] = (),
    take_split_always: Sequence[int] = (),
    allow_any_take: Split | None = None,
    allow_place: bool = False,
) -> RuleSet:
    """
    Build a rule set from per-policy take lists.

    Rules are appended in a fixed order: never-list, optional-list,
    always-list, any-take, place. Empty lists produce no rule.
    """
    rules: list[NimRule] = []

    if take_split_never:
        rules.append(NimRule(TakeSize.list(take_split_never), Split.NEVER))
    if take_split_optional:
        rules.append(NimRule(TakeSize.list(take_split_optional), Split.OPTIONAL))
    if take_split_always:
        rules.append(NimRule(TakeSize.list(take_split_always), Split.ALWAYS))
    if allow_any_take is not None:
        rules.append(NimRule(TakeSize.any(), allow_any_take))
    if allow_place:
        rules.append(NimRule(TakeSize.place(), Split.NEVER))

    return RuleSet(tuple(rules))
