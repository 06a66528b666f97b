"""
Nimber Evaluator - Game values via the MEX and XOR rules.

The nimber of a stack is the minimum excluded value (MEX) of the
nimbers of every position reachable in one move:
- taking `a` coins without a split reaches height - a
- splitting into (p, q) reaches two independent stacks, worth
  nimber(p) ^ nimber(q)
- placing `c` pool coins reaches height + c

Every take strictly shrinks the stacks involved, so heights are filled
bottom-up from 0: by the time a height is evaluated, all its successors
are already cached. This keeps deep stacks free of recursion limits.

Pools are not supported yet: evaluating with a non-zero pool size raises
PoolNotSupportedError. Place moves are valued with the pool forced to 0
to keep the evaluation finite. That is an approximation, not validated
Sprague-Grundy semantics for pooled games.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..spec_schema.rules import NimRule, RuleSet, Split, TakeKind, as_rule_set
from ..spec_schema.validation import require_valid_rule_set
from .action import PlaceAction, TakeAction
from .action_generator import calculate_legal_moves
from .cache import NimberCache, NimberTable, default_cache
from .state import ZERO, NimGame, Nimber, Stack

logger = logging.getLogger("nimlib.nimbers")


class PoolNotSupportedError(NotImplementedError):
    """Raised when evaluating a nimber with coins in the pool."""


@dataclass
class NimberEvaluator:
    """
    Calculates nimbers under any rule set, memoizing into a NimberCache.

    One evaluator (and cache) can serve many rule sets; each rule set
    gets its own cache partition.
    """
    cache: NimberCache = field(default_factory=NimberCache)

    def nimber_for_height(
        self,
        height: int,
        rules: RuleSet | Iterable[NimRule],
        pool_size: int = 0,
    ) -> Nimber:
        """
        Calculate the nimber of a single stack of `height` coins.

        `pool_size` is the number of coins in the current player's pool
        and must be 0 for now.

        Rule sets that fail validation raise RuleSetValidationError
        before any nimber is cached.
        """
        if pool_size != 0:
            raise PoolNotSupportedError(
                f"Pool coins are not supported yet (pool_size={pool_size})"
            )
        if height < 0:
            raise ValueError(f"Stack height must be non-negative, got {height}")

        rules = as_rule_set(rules)
        table = self.cache.partition(rules)

        nimber = table.get(height, pool_size)
        if nimber is not None:
            return nimber

        require_valid_rule_set(rules)

        logger.debug("Filling nimbers up to height %d for %d rule(s)", height, len(rules))
        for h in range(height + 1):
            if table.get(h, pool_size) is None:
                table.put(h, pool_size, self._mex_for_height(h, rules, table))

        return table.get(height, pool_size)

    def _mex_for_height(self, height: int, rules: RuleSet, table: NimberTable) -> Nimber:
        """Evaluate one height, assuming every smaller height is cached."""
        exclusion: list[Nimber] = []

        for move in calculate_legal_moves([Stack(height)], rules, (0, 0)):
            if isinstance(move, TakeAction):
                if move.split.parts is not None:
                    first, second = move.split.parts
                    exclusion.append(
                        self._successor(first.height, rules, table)
                        ^ self._successor(second.height, rules, table)
                    )
                else:
                    exclusion.append(self._successor(height - move.amount, rules, table))
            elif isinstance(move, PlaceAction):
                # Pool forced to 0 so placing can't recurse forever
                exclusion.append(self._successor(height + move.amount, rules, table))
            else:
                raise AssertionError(f"Unhandled move: {move!r}")

        return Nimber.mex(exclusion)

    def _successor(self, height: int, rules: RuleSet, table: NimberTable) -> Nimber:
        """Nimber of a successor height, read from the partition when present."""
        nimber = table.get(height, 0)
        if nimber is None:
            nimber = self.nimber_for_height(height, rules)
        return nimber

    def nimber_for_stacks(
        self,
        stacks: Iterable[Stack],
        rules: RuleSet | Iterable[NimRule],
    ) -> Nimber:
        """XOR of each stack's nimber (Sprague-Grundy sum). Not memoized."""
        rules = as_rule_set(rules)
        total = ZERO
        for stack in stacks:
            total = total ^ self.nimber_for_height(stack.height, rules)
        return total


def calculate_nimber_for_height(
    height: int,
    rules: RuleSet | Iterable[NimRule],
    pool_size: int = 0,
    cache: NimberCache | None = None,
) -> Nimber:
    """
    Calculate the nimber of a stack of `height` coins under `rules`.

    Uses the process-wide cache unless one is given.
    """
    return NimberEvaluator(cache if cache is not None else default_cache).nimber_for_height(
        height, rules, pool_size
    )


def calculate_game_nimber(game: NimGame, cache: NimberCache | None = None) -> Nimber:
    """Nimber of a whole game; pools are ignored."""
    evaluator = NimberEvaluator(cache if cache is not None else default_cache)
    return evaluator.nimber_for_stacks(game.stacks, game.rules)


def estimate_evaluation_moves(height: int, rules: RuleSet | Iterable[NimRule]) -> int:
    """
    Upper bound on the moves generated while filling heights 0..height.

    Take lists without splits grow linearly with the height, splits and
    any-take rules quadratically, and any-take rules with splits
    cubically. Place rules add nothing since evaluation runs with empty
    pools.
    """
    rules = as_rule_set(rules)
    heights = height + 1
    total = 0
    for rule in rules:
        if rule.take.kind == TakeKind.LIST:
            per_height = len(rule.take.amounts)
            if rule.split != Split.NEVER:
                per_height *= 1 + height // 2
            total += per_height * heights
        elif rule.take.kind == TakeKind.ANY:
            total += height * heights // 2
            if rule.split != Split.NEVER:
                total += height * heights * (2 * height + 1) // 24
        elif rule.take.kind == TakeKind.PLACE:
            continue
        else:
            raise AssertionError(f"Unhandled take kind: {rule.take.kind}")
    return total
