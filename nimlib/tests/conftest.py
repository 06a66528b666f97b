"""
Pytest fixtures for nimlib tests.
"""

import pytest

from ..engine_core.cache import NimberCache, clear_cache
from ..engine_core.nimbers import NimberEvaluator
from ..engine_core.state import NimGame, Stack
from ..spec_schema.rules import NimRule, RuleSet, Split, TakeSize


@pytest.fixture(autouse=True)
def fresh_default_cache():
    """Keep the process-wide cache from leaking between tests."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def cache() -> NimberCache:
    return NimberCache()


@pytest.fixture
def evaluator(cache: NimberCache) -> NimberEvaluator:
    return NimberEvaluator(cache)


@pytest.fixture
def simple_rules() -> RuleSet:
    """Take 1, 2 or 3 coins, never split."""
    return RuleSet((NimRule(TakeSize.list([1, 2, 3]), Split.NEVER),))


@pytest.fixture
def rules_23() -> RuleSet:
    """Take 2 or 3 coins, never split."""
    return RuleSet((NimRule(TakeSize.list([2, 3]), Split.NEVER),))


@pytest.fixture
def any_never_rules() -> RuleSet:
    """Take any amount, never split (classic Nim)."""
    return RuleSet((NimRule(TakeSize.any(), Split.NEVER),))


@pytest.fixture
def always_split_rules() -> RuleSet:
    """Take 1, 2 or 3 coins, always split the remainder."""
    return RuleSet((NimRule(TakeSize.list([1, 2, 3]), Split.ALWAYS),))


@pytest.fixture
def place_rules() -> RuleSet:
    """Take 1, 2 or 3 coins, or place coins from a pool."""
    return RuleSet((
        NimRule(TakeSize.list([1, 2, 3]), Split.NEVER),
        NimRule(TakeSize.place(), Split.NEVER),
    ))


@pytest.fixture
def pool_game(place_rules: RuleSet) -> NimGame:
    """Three stacks with coins in both pools."""
    return NimGame(
        rules=place_rules,
        stacks=[Stack(4), Stack(2), Stack(7)],
        pool_a=3,
        pool_b=1,
    )
