"""
Reducer - Validates and applies moves to a game.

The reducer is the single point of game mutation.
All stack and pool changes must go through apply_move().

Design principles:
- check_move has no side effects
- Recoverable problems are returned as MoveResult failures, never raised
- Broken invariants (a pool going negative) raise PoolUnderflowError
"""

from __future__ import annotations
from dataclasses import dataclass

from ..spec_schema.rules import Split, TakeKind
from .action import MoveErrorKind, MoveResult, NimAction, PlaceAction, TakeAction
from .state import NimGame, Stack


class PoolUnderflowError(RuntimeError):
    """Raised when a pool would be debited below zero."""


def _split_allowed(split_policy: Split, action: TakeAction, height: int) -> bool:
    """Whether a take's split satisfies a rule's split policy."""
    if split_policy == Split.NEVER:
        return not action.split.is_split
    if split_policy == Split.OPTIONAL:
        return not action.split.is_split or action.split.is_valid_for(height, action.amount)
    if split_policy == Split.ALWAYS:
        return action.split.is_valid_for(height, action.amount)
    raise AssertionError(f"Unhandled split policy: {split_policy}")


@dataclass
class Reducer:
    """
    Reducer applies moves to a game.

    Stateless - all state is in NimGame.
    """
    game: NimGame

    def check(self, action: NimAction) -> MoveResult:
        """
        Validate that an action is legal in the current position.

        Returns MoveResult.ok() if valid, a failure otherwise.
        """
        if isinstance(action, TakeAction):
            return self._check_take(action)
        if isinstance(action, PlaceAction):
            return self._check_place(action)
        return MoveResult.failure(MoveErrorKind.INVALID_MOVE, f"Unknown action: {action!r}")

    def apply(self, action: NimAction, checked: bool = True) -> MoveResult:
        """
        Apply an action to the game in place.

        With checked=False validation is skipped, but stack bounds are
        still enforced.
        """
        if checked:
            result = self.check(action)
            if not result:
                return result

        if isinstance(action, TakeAction):
            if not self._has_stack(action.stack_index):
                return self._no_such_stack(action.stack_index)
            return self._handle_take(action)
        if isinstance(action, PlaceAction):
            if not self._has_stack(action.stack_index):
                return self._no_such_stack(action.stack_index)
            return self._handle_place(action)
        return MoveResult.failure(MoveErrorKind.INVALID_MOVE, f"Unknown action: {action!r}")

    def _check_take(self, action: TakeAction) -> MoveResult:
        game = self.game
        if not self._has_stack(action.stack_index):
            return self._no_such_stack(action.stack_index)

        # Amounts below 1 match no rule
        matching = game.rules.matching_take_rules(action.amount)
        if not matching:
            return MoveResult.failure(
                MoveErrorKind.NO_SUCH_RULE,
                f"No rule allows taking {action.amount} coin(s)",
            )

        height = game.stacks[action.stack_index].height
        if height < action.amount:
            return MoveResult.failure(
                MoveErrorKind.INSUFFICIENT_STACK_COINS,
                f"Stack {action.stack_index} has {height} coin(s), cannot take {action.amount}",
            )

        if not any(_split_allowed(rule.split, action, height) for rule in matching):
            return MoveResult.failure(
                MoveErrorKind.INVALID_SPLIT,
                f"Split '{action.split}' is not allowed when taking {action.amount} "
                f"from a stack of {height}",
            )

        return MoveResult.ok()

    def _check_place(self, action: PlaceAction) -> MoveResult:
        game = self.game
        if not any(rule.take.kind == TakeKind.PLACE for rule in game.rules):
            return MoveResult.failure(MoveErrorKind.NO_SUCH_RULE, "No rule allows placing coins")

        if not self._has_stack(action.stack_index):
            return self._no_such_stack(action.stack_index)

        if action.amount < 1:
            return MoveResult.failure(
                MoveErrorKind.INVALID_MOVE,
                f"Must place at least one coin, got {action.amount}",
            )

        available = game.pool(action.source)
        if available < action.amount:
            return MoveResult.failure(
                MoveErrorKind.INSUFFICIENT_PLAYER_COINS,
                f"Pool {action.source.value} has {available} coin(s), cannot place {action.amount}",
            )

        return MoveResult.ok()

    def _handle_take(self, action: TakeAction) -> MoveResult:
        """Handle take action."""
        game = self.game
        index = action.stack_index
        height = game.stacks[index].height

        if height < action.amount:
            return MoveResult.failure(
                MoveErrorKind.INSUFFICIENT_STACK_COINS,
                f"Stack {index} has {height} coin(s), cannot take {action.amount}",
            )

        if action.split.parts is not None:
            first, second = action.split.parts
            game.stacks[index:index + 1] = [first, second]
        else:
            game.stacks[index] = Stack(height - action.amount)

        if action.source is not None:
            game.set_pool(action.source, game.pool(action.source) + action.amount)

        return MoveResult.ok()

    def _handle_place(self, action: PlaceAction) -> MoveResult:
        """Handle place action."""
        game = self.game
        remaining = game.pool(action.source) - action.amount
        if remaining < 0:
            raise PoolUnderflowError(
                f"Pool {action.source.value} has {game.pool(action.source)} coin(s), "
                f"cannot place {action.amount}"
            )

        game.set_pool(action.source, remaining)
        index = action.stack_index
        game.stacks[index] = Stack(game.stacks[index].height + action.amount)
        return MoveResult.ok()

    def _has_stack(self, stack_index: int) -> bool:
        return 0 <= stack_index < len(self.game.stacks)

    def _no_such_stack(self, stack_index: int) -> MoveResult:
        return MoveResult.failure(
            MoveErrorKind.NO_SUCH_STACK,
            f"No stack at index {stack_index} (game has {len(self.game.stacks)})",
        )


def check_move(game: NimGame, action: NimAction) -> MoveResult:
    """Check whether an action is legal, without changing the game."""
    return Reducer(game).check(action)


def apply_move(game: NimGame, action: NimAction) -> MoveResult:
    """Validate an action, then apply it to the game in place."""
    return Reducer(game).apply(action, checked=True)


def apply_move_unchecked(game: NimGame, action: NimAction) -> MoveResult:
    """
    Apply an action without validating it against the rules.

    For trusted callers that have already checked the move. Stack
    indices are still bounds-checked.
    """
    return Reducer(game).apply(action, checked=False)
