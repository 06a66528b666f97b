"""
Action Generator - Generates all legal moves for a position.

The action generator is used by:
1. The nimber evaluator to discover successor positions
2. The CLI and API to list available moves
3. Tests, as the reference for what check_move must accept

Move order is deterministic: stack by stack, rule by rule in rule-set
order, amounts ascending within ANY rules and in list order within LIST
rules, the unsplit take before its splits.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..spec_schema.rules import NimRule, RuleSet, Split, TakeKind, as_rule_set
from ..spec_schema.validation import check_place_rule
from .action import NimAction, NimSplit, PlaceAction, TakeAction
from .state import NimGame, PoolSide, Stack


def calculate_splits(height: int) -> list[tuple[Stack, Stack]]:
    """
    Calculate all ways to split a height into two non-empty parts,
    ignoring order.

        calculate_splits(1) == []
        calculate_splits(4) == [(Stack(1), Stack(3)), (Stack(2), Stack(2))]
    """
    # Stacks of height 0 and 1 can't be split
    if height <= 1:
        return []

    return [(Stack(i), Stack(height - i)) for i in range(1, height // 2 + 1)]


@dataclass
class MoveGenerator:
    """
    Generates legal moves under a rule set.

    Stateless apart from the rules it was created with.
    """
    rules: RuleSet

    def __post_init__(self):
        self.rules = as_rule_set(self.rules)

    def generate(
        self,
        stacks: Sequence[Stack],
        pool_sizes: tuple[int, int] = (0, 0),
    ) -> list[NimAction]:
        """
        Generate all legal moves for the given stacks and pools.

        Returns a fresh list of fully-specified actions.
        """
        moves: list[NimAction] = []
        for stack_index, stack in enumerate(stacks):
            for rule in self.rules:
                moves.extend(self._generate_for_rule(stack_index, stack.height, rule, pool_sizes))
        return moves

    def _generate_for_rule(
        self,
        stack_index: int,
        height: int,
        rule: NimRule,
        pool_sizes: tuple[int, int],
    ) -> list[NimAction]:
        if rule.take.kind == TakeKind.LIST:
            amounts = [a for a in rule.take.amounts if a <= height]
            return self._generate_takes(stack_index, height, amounts, rule.split)

        if rule.take.kind == TakeKind.ANY:
            return self._generate_takes(stack_index, height, range(1, height + 1), rule.split)

        if rule.take.kind == TakeKind.PLACE:
            check_place_rule(rule)
            return self._generate_places(stack_index, pool_sizes)

        raise AssertionError(f"Unhandled take kind: {rule.take.kind}")

    def _generate_takes(
        self,
        stack_index: int,
        height: int,
        amounts: Iterable[int],
        split: Split,
    ) -> list[NimAction]:
        """Generate take moves for each amount under a split policy."""
        moves: list[NimAction] = []
        for amount in amounts:
            if split in (Split.NEVER, Split.OPTIONAL):
                moves.append(TakeAction(stack_index, amount, NimSplit.no()))
            if split in (Split.OPTIONAL, Split.ALWAYS):
                for first, second in calculate_splits(height - amount):
                    moves.append(TakeAction(stack_index, amount, NimSplit.yes(first, second)))
        return moves

    def _generate_places(
        self,
        stack_index: int,
        pool_sizes: tuple[int, int],
    ) -> list[NimAction]:
        """Generate place moves from both players' pools."""
        moves: list[NimAction] = []
        for side, pool_size in zip((PoolSide.A, PoolSide.B), pool_sizes):
            for amount in range(1, pool_size + 1):
                moves.append(PlaceAction(stack_index, amount, side))
        return moves


def calculate_legal_moves(
    stacks: Sequence[Stack],
    rules: RuleSet | Iterable[NimRule],
    pool_sizes: tuple[int, int] = (0, 0),
) -> list[NimAction]:
    """
    Convenience function to get legal moves.

    Creates a MoveGenerator and generates moves.
    """
    generator = MoveGenerator(rules=as_rule_set(rules))
    return generator.generate(stacks, pool_sizes)


def enumerate_moves(game: NimGame) -> list[NimAction]:
    """All legal moves for a game."""
    return calculate_legal_moves(game.stacks, game.rules, game.pool_sizes)


def is_legal(game: NimGame, action: NimAction) -> bool:
    """Check if a specific action is among the generated legal moves."""
    return action in enumerate_moves(game)
