"""
Tests for nimber evaluation.

Tests:
- Hand-verified nimber sequences
- Base case and XOR combination
- Split rules against brute force
- Pool precondition
"""

import pytest

from ..engine_core.action_generator import calculate_legal_moves, calculate_splits
from ..engine_core.cache import default_cache
from ..engine_core.nimbers import (
    NimberEvaluator,
    PoolNotSupportedError,
    calculate_game_nimber,
    calculate_nimber_for_height,
    estimate_evaluation_moves,
)
from ..engine_core.state import NimGame, Nimber, Stack
from ..spec_schema.rules import NimRule, RuleSet, Split, TakeKind, TakeSize
from ..spec_schema.validation import RuleSetValidationError


class TestNimber:
    """Tests for the Nimber value type."""

    def test_xor(self):
        """XOR combines nimbers bitwise."""
        assert Nimber(5) ^ Nimber(3) == Nimber(6)
        assert Nimber(7) ^ Nimber(7) == Nimber(0)

    def test_not_an_int(self):
        """Nimbers don't mix with plain integers."""
        with pytest.raises(TypeError):
            Nimber(1) ^ 1

    def test_mex(self):
        """mex is the smallest value not excluded."""
        assert Nimber.mex([]) == Nimber(0)
        assert Nimber.mex([Nimber(0), Nimber(2), Nimber(0)]) == Nimber(1)
        assert Nimber.mex([Nimber(1), Nimber(0), Nimber(2)]) == Nimber(3)

    def test_negative_rejected(self):
        """Nimbers are never negative."""
        with pytest.raises(ValueError):
            Nimber(-1)


class TestHandVerifiedNimbers:
    """Known nimber sequences."""

    def test_simple_123_game(self, simple_rules):
        """Take 1, 2 or 3: 0, 1, 2, 3 repeating."""
        expected = [0, 1, 2, 3, 0, 1, 2, 3]
        for height, value in enumerate(expected):
            assert Stack(height).calculate_nimber(simple_rules, 0) == Nimber(value)

    def test_advanced_23_game(self, rules_23):
        """Take 2 or 3: 0, 0, 1, 1, 2 repeating."""
        expected = [0, 0, 1, 1, 2, 0, 0, 1]
        for height, value in enumerate(expected):
            assert Stack(height).calculate_nimber(rules_23, 0) == Nimber(value)

    def test_classic_nim(self, evaluator, any_never_rules):
        """Taking any amount: a stack is worth its height."""
        for height in range(0, 40):
            assert evaluator.nimber_for_height(height, any_never_rules) == Nimber(height)

    def test_simple_game_is_height_mod_four(self, evaluator, simple_rules):
        """Take 1, 2 or 3 is worth the height modulo four."""
        for height in range(0, 200):
            assert evaluator.nimber_for_height(height, simple_rules) == Nimber(height % 4)

    def test_base_case(self, evaluator, simple_rules, rules_23, always_split_rules):
        """An empty stack is worth 0 whatever the rules."""
        for rules in (simple_rules, rules_23, always_split_rules, RuleSet()):
            assert evaluator.nimber_for_height(0, rules) == Nimber(0)

    def test_deep_stack(self, evaluator, simple_rules):
        """Large heights don't hit the recursion limit."""
        assert evaluator.nimber_for_height(20_000, simple_rules) == Nimber(0)

    def test_accepts_plain_rule_list(self, evaluator):
        """A plain list of rules works as a rule set."""
        rules = [NimRule(TakeSize.list([1, 2, 3]), Split.NEVER)]
        assert evaluator.nimber_for_height(6, rules) == Nimber(2)


def _brute_force(height: int, rules: RuleSet, memo: dict) -> int:
    """Straightforward recursive MEX, independent of the evaluator."""
    if height in memo:
        return memo[height]

    values = set()
    for rule in rules:
        if rule.take.kind == TakeKind.LIST:
            amounts = [a for a in rule.take.amounts if a <= height]
        else:
            amounts = list(range(1, height + 1))
        for amount in amounts:
            rest = height - amount
            if rule.split in (Split.NEVER, Split.OPTIONAL):
                values.add(_brute_force(rest, rules, memo))
            if rule.split in (Split.OPTIONAL, Split.ALWAYS):
                for a, b in calculate_splits(rest):
                    values.add(_brute_force(a.height, rules, memo) ^ _brute_force(b.height, rules, memo))

    result = 0
    while result in values:
        result += 1
    memo[height] = result
    return result


class TestSplitNimbers:
    """Nimbers for rule sets with splits."""

    @pytest.mark.parametrize("rules", [
        RuleSet((NimRule(TakeSize.list([1, 2, 3]), Split.ALWAYS),)),
        RuleSet((NimRule(TakeSize.list([1, 2]), Split.OPTIONAL),)),
        RuleSet((NimRule(TakeSize.any(), Split.OPTIONAL),)),
        RuleSet((
            NimRule(TakeSize.list([1, 2, 3]), Split.NEVER),
            NimRule(TakeSize.any(), Split.OPTIONAL),
        )),
    ])
    def test_matches_brute_force(self, evaluator, rules):
        """Split rule sets agree with a naive recursive MEX."""
        memo: dict = {}
        for height in range(0, 30):
            expected = _brute_force(height, rules, memo)
            assert evaluator.nimber_for_height(height, rules) == Nimber(expected)

    def test_kayles_like(self, evaluator):
        """Take 1 or 2, optionally split: Kayles."""
        rules = RuleSet((NimRule(TakeSize.list([1, 2]), Split.OPTIONAL),))
        expected = [0, 1, 2, 3, 1, 4, 3, 2, 1, 4, 2, 6]
        for height, value in enumerate(expected):
            assert evaluator.nimber_for_height(height, rules) == Nimber(value)


class TestGameNimber:
    """XOR combination of stacks."""

    def test_xor_of_stacks(self, cache, rules_23):
        """A game is worth the XOR of its stacks."""
        heights = [2, 4, 7, 9, 13]
        game = NimGame(rules=rules_23, stacks=[Stack(h) for h in heights])

        expected = Nimber(0)
        for h in heights:
            expected = expected ^ calculate_nimber_for_height(h, rules_23, cache=cache)

        assert calculate_game_nimber(game, cache) == expected
        assert game.calculate_nimber(cache) == expected

    @pytest.mark.parametrize("heights", [[], [0], [3, 3], [1, 2, 3], [5, 6, 7, 8]])
    def test_classic_nim_sum(self, any_never_rules, heights):
        """Classic Nim is worth the XOR of the heights."""
        game = NimGame(rules=any_never_rules, stacks=[Stack(h) for h in heights])

        total = 0
        for h in heights:
            total ^= h
        assert game.calculate_nimber() == Nimber(total)

    def test_default_game(self):
        """Ten coins, take 1-3: worth *2."""
        assert NimGame.default().calculate_nimber() == Nimber(2)

    def test_pools_ignored(self, place_rules):
        """Pool coins don't change a game's nimber."""
        game = NimGame(rules=place_rules, stacks=[Stack(5)], pool_a=4, pool_b=4)
        assert game.calculate_nimber() == Nimber(1)


class TestPoolPrecondition:
    """Evaluation is only defined for an empty pool."""

    def test_non_zero_pool_raises(self, evaluator, place_rules):
        """A non-zero pool raises PoolNotSupportedError."""
        with pytest.raises(PoolNotSupportedError):
            evaluator.nimber_for_height(3, place_rules, pool_size=2)

    def test_raises_even_when_cached(self, cache, simple_rules):
        """Cached heights still refuse a non-zero pool."""
        evaluator = NimberEvaluator(cache)
        evaluator.nimber_for_height(3, simple_rules)

        with pytest.raises(PoolNotSupportedError):
            evaluator.nimber_for_height(3, simple_rules, pool_size=1)

    def test_is_not_implemented_error(self):
        """PoolNotSupportedError is a NotImplementedError."""
        assert issubclass(PoolNotSupportedError, NotImplementedError)


class TestDefaultCache:
    """Module-level functions use the process-wide cache."""

    def test_uses_default_cache(self, simple_rules):
        """Without a cache the process-wide one is filled."""
        calculate_nimber_for_height(5, simple_rules)
        assert default_cache.size(simple_rules) == 6

    def test_explicit_cache_isolated(self, cache, simple_rules):
        """An explicit cache keeps the default one empty."""
        calculate_nimber_for_height(5, simple_rules, cache=cache)
        assert cache.size(simple_rules) == 6
        assert default_cache.size(simple_rules) == 0


class TestInvalidRules:
    """Rule sets are validated before evaluation."""

    @pytest.mark.parametrize("amounts", [[0, 1], [-1, 2]])
    def test_non_positive_amount_raises(self, evaluator, cache, amounts):
        """A take list with a non-positive amount is refused up front."""
        rules = RuleSet((NimRule(TakeSize.list(amounts), Split.NEVER),))

        with pytest.raises(RuleSetValidationError):
            evaluator.nimber_for_height(5, rules)
        assert cache.size(rules) == 0

    def test_place_with_split_raises(self, evaluator):
        """Place rules with a split are refused even at height 0."""
        rules = RuleSet((NimRule(TakeSize.place(), Split.ALWAYS),))

        with pytest.raises(RuleSetValidationError):
            evaluator.nimber_for_height(0, rules)


class TestEstimateEvaluationMoves:
    """The move estimate bounds the work of filling the cache."""

    @pytest.mark.parametrize("rule", [
        NimRule(TakeSize.list([1, 2, 3]), Split.NEVER),
        NimRule(TakeSize.list([2, 5]), Split.OPTIONAL),
        NimRule(TakeSize.list([1, 3]), Split.ALWAYS),
        NimRule(TakeSize.any(), Split.NEVER),
        NimRule(TakeSize.any(), Split.OPTIONAL),
        NimRule(TakeSize.any(), Split.ALWAYS),
        NimRule(TakeSize.place(), Split.NEVER),
    ])
    def test_upper_bound(self, rule):
        """The estimate is never below the moves actually generated."""
        rules = RuleSet((rule,))
        for height in (0, 1, 7, 40):
            generated = sum(
                len(calculate_legal_moves([Stack(h)], rules)) for h in range(height + 1)
            )
            assert generated <= estimate_evaluation_moves(height, rules)

    def test_grows_with_rule_cost(self, simple_rules, any_never_rules):
        """Splits and any-take rules cost more than plain take lists."""
        any_optional = RuleSet((NimRule(TakeSize.any(), Split.OPTIONAL),))

        plain = estimate_evaluation_moves(100, simple_rules)
        anything = estimate_evaluation_moves(100, any_never_rules)
        splitting = estimate_evaluation_moves(100, any_optional)

        assert plain < anything < splitting
