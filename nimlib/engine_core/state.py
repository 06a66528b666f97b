"""
Game State - Stacks, nimbers and the Nim game aggregate.

Design principles:
- Stack and Nimber are immutable value types
- Nimber is deliberately not an int, so game values can't be mixed up
  with heights or coin amounts
- NimGame is mutable: moves are applied to it in place
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from ..spec_schema.rules import NimRule, RuleSet, Split, TakeSize, as_rule_set

if TYPE_CHECKING:
    from .cache import NimberCache


class PoolSide(Enum):
    """The two players' coin pools."""
    A = "A"
    B = "B"


@dataclass(frozen=True, order=True)
class Stack:
    """A stack of coins, represented by its height."""
    height: int

    def __post_init__(self):
        if self.height < 0:
            raise ValueError(f"Stack height must be non-negative, got {self.height}")

    def __int__(self) -> int:
        return self.height

    def __str__(self) -> str:
        return str(self.height)

    def calculate_nimber(self, rules: RuleSet | Iterable[NimRule], pool_size: int = 0) -> Nimber:
        """Calculate the nimber of this stack (pool_size must be 0 for now)."""
        from .nimbers import calculate_nimber_for_height
        return calculate_nimber_for_height(self.height, rules, pool_size)


@dataclass(frozen=True, order=True)
class Nimber:
    """A game value (Grundy value). Combine independent games with ^."""
    value: int

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"Nimber must be non-negative, got {self.value}")

    def __xor__(self, other: Nimber) -> Nimber:
        if not isinstance(other, Nimber):
            return NotImplemented
        return Nimber(self.value ^ other.value)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"*{self.value}"

    @classmethod
    def mex(cls, excluded: Iterable[Nimber]) -> Nimber:
        """The minimum excluded nimber of a collection."""
        seen = {n.value for n in excluded}
        value = 0
        while value in seen:
            value += 1
        return cls(value)


ZERO = Nimber(0)


def _default_rules() -> RuleSet:
    return RuleSet((NimRule(TakeSize.list([1, 2, 3]), Split.NEVER),))


@dataclass
class NimGame:
    """
    A Nim game position: rules, stacks and both players' pools.

    The pools are only used by place rules, and are ignored when
    calculating the nimber.
    """
    rules: RuleSet = field(default_factory=_default_rules)
    stacks: list[Stack] = field(default_factory=list)
    pool_a: int = 0
    pool_b: int = 0

    def __post_init__(self):
        self.rules = as_rule_set(self.rules)
        self.stacks = [s if isinstance(s, Stack) else Stack(s) for s in self.stacks]
        if self.pool_a < 0 or self.pool_b < 0:
            raise ValueError("Pool sizes must be non-negative")

    @classmethod
    def default(cls) -> NimGame:
        """The classic game: take 1, 2 or 3 coins from a single stack of 10."""
        return cls(stacks=[Stack(10)])

    @property
    def pool_sizes(self) -> tuple[int, int]:
        return (self.pool_a, self.pool_b)

    @property
    def heights(self) -> list[int]:
        return [s.height for s in self.stacks]

    def pool(self, side: PoolSide) -> int:
        """Get the number of coins in a player's pool."""
        if side == PoolSide.A:
            return self.pool_a
        return self.pool_b

    def set_pool(self, side: PoolSide, coins: int):
        if side == PoolSide.A:
            self.pool_a = coins
        else:
            self.pool_b = coins

    def copy(self) -> NimGame:
        return NimGame(
            rules=self.rules,
            stacks=list(self.stacks),
            pool_a=self.pool_a,
            pool_b=self.pool_b,
        )

    def calculate_nimber(self, cache: NimberCache | None = None) -> Nimber:
        """Calculate the nimber of the position using the MEX & XOR rules."""
        from .nimbers import calculate_game_nimber
        return calculate_game_nimber(self, cache)
