"""
Action System - Moves, splits, and move results.

Actions represent:
1. Taking coins from a stack, optionally splitting the remainder
2. Placing coins from a player's pool onto a stack

Actions reference stacks by index only, so the same action can be
checked against any game.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .state import PoolSide, Stack


@dataclass(frozen=True)
class NimSplit:
    """
    How the remainder of a stack is left after taking coins.

    Either no split (`parts` is None) or two non-empty stacks whose
    heights plus the taken amount add up to the original height.
    """
    parts: tuple[Stack, Stack] | None = None

    @classmethod
    def no(cls) -> NimSplit:
        """Factory for leaving the remainder whole."""
        return cls()

    @classmethod
    def yes(cls, first: Stack, second: Stack) -> NimSplit:
        """Factory for splitting the remainder into two stacks."""
        return cls(parts=(first, second))

    @property
    def is_split(self) -> bool:
        return self.parts is not None

    def is_valid_for(self, height: int, amount: int) -> bool:
        """Whether both parts are non-empty and account for every remaining coin."""
        if self.parts is None:
            return False
        first, second = self.parts
        return (
            first.height >= 1
            and second.height >= 1
            and first.height + second.height + amount == height
        )

    def __str__(self) -> str:
        if self.parts is None:
            return "no split"
        return f"{self.parts[0]} + {self.parts[1]}"


@dataclass(frozen=True)
class TakeAction:
    """Take `amount` coins from a stack, optionally crediting a player's pool."""
    stack_index: int
    amount: int
    split: NimSplit = NimSplit()
    source: PoolSide | None = None


@dataclass(frozen=True)
class PlaceAction:
    """Place `amount` coins from a player's pool onto a stack."""
    stack_index: int
    amount: int
    source: PoolSide


NimAction = Union[TakeAction, PlaceAction]


def describe_action(action: NimAction) -> str:
    """Render an action for humans."""
    if isinstance(action, TakeAction):
        text = f"take {action.amount} from stack {action.stack_index}"
        if action.split.is_split:
            text += f", split into {action.split}"
        if action.source is not None:
            text += f" into pool {action.source.value}"
        return text
    if isinstance(action, PlaceAction):
        return (
            f"place {action.amount} on stack {action.stack_index} "
            f"from pool {action.source.value}"
        )
    raise TypeError(f"Not a Nim action: {action!r}")


class MoveErrorKind(Enum):
    """Reasons a move can be rejected."""
    NO_SUCH_STACK = "no_such_stack"
    NO_SUCH_RULE = "no_such_rule"
    INSUFFICIENT_STACK_COINS = "insufficient_stack_coins"
    INSUFFICIENT_PLAYER_COINS = "insufficient_player_coins"
    INVALID_SPLIT = "invalid_split"
    # Generic; prefer adding a specific kind
    INVALID_MOVE = "invalid_move"


@dataclass
class MoveResult:
    """
    Result of checking or applying a move.

    Failures carry a MoveErrorKind and a human-readable message.
    """
    success: bool
    error_kind: MoveErrorKind | None = None
    error: str | None = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls) -> MoveResult:
        return cls(success=True)

    @classmethod
    def failure(cls, error_kind: MoveErrorKind, error: str) -> MoveResult:
        """Create a failure result."""
        return cls(success=False, error_kind=error_kind, error=error)
