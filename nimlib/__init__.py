"""
nimlib - Nimbers and legal moves for generalized Nim games.

A game is a set of coin stacks plus a rule set describing:
- How many coins a move may take (a fixed list, any amount, or placing
  coins from a pool)
- Whether the remainder must, may, or must not be split in two

The library provides:
- Nimber (Grundy value) calculation via the MEX & XOR rules, memoized
  per rule set
- Legal move generation
- Move validation and application
"""

__version__ = "0.2.0"

from .spec_schema import (
    NimRule,
    RuleSet,
    RuleSetValidationError,
    Split,
    TakeKind,
    TakeSize,
    make_rule_set,
    rule_set_from_json,
    rule_set_to_json,
    validate_rule_set,
)
from .engine_core import (
    MoveErrorKind,
    MoveResult,
    NimAction,
    NimberCache,
    NimberEvaluator,
    Nimber,
    NimGame,
    NimSplit,
    PlaceAction,
    PoolNotSupportedError,
    PoolSide,
    PoolUnderflowError,
    Stack,
    TakeAction,
    apply_move,
    apply_move_unchecked,
    calculate_game_nimber,
    calculate_legal_moves,
    calculate_nimber_for_height,
    calculate_splits,
    check_move,
    clear_cache,
    describe_action,
    enumerate_moves,
)

__all__ = [
    "__version__",
    "NimRule",
    "RuleSet",
    "RuleSetValidationError",
    "Split",
    "TakeKind",
    "TakeSize",
    "make_rule_set",
    "rule_set_from_json",
    "rule_set_to_json",
    "validate_rule_set",
    "MoveErrorKind",
    "MoveResult",
    "NimAction",
    "NimberCache",
    "NimberEvaluator",
    "Nimber",
    "NimGame",
    "NimSplit",
    "PlaceAction",
    "PoolNotSupportedError",
    "PoolSide",
    "PoolUnderflowError",
    "Stack",
    "TakeAction",
    "apply_move",
    "apply_move_unchecked",
    "calculate_game_nimber",
    "calculate_legal_moves",
    "calculate_nimber_for_height",
    "calculate_splits",
    "check_move",
    "clear_cache",
    "describe_action",
    "enumerate_moves",
]
