"""
Engine Core - Move generation, move validation and nimber evaluation.

The engine:
1. Holds a NimGame (rules, stacks, pools)
2. Generates legal moves
3. Checks and applies moves via the reducer
4. Calculates nimbers, memoized per rule set
"""

from .state import NimGame, Nimber, PoolSide, Stack
from .action import (
    MoveErrorKind,
    MoveResult,
    NimAction,
    NimSplit,
    PlaceAction,
    TakeAction,
    describe_action,
)
from .action_generator import MoveGenerator, calculate_legal_moves, calculate_splits, enumerate_moves
from .reducer import PoolUnderflowError, Reducer, apply_move, apply_move_unchecked, check_move
from .cache import NimberCache, clear_cache, default_cache
from .nimbers import (
    NimberEvaluator,
    PoolNotSupportedError,
    calculate_game_nimber,
    calculate_nimber_for_height,
    estimate_evaluation_moves,
)

__all__ = [
    "NimGame",
    "Nimber",
    "PoolSide",
    "Stack",
    "MoveErrorKind",
    "MoveResult",
    "NimAction",
    "NimSplit",
    "PlaceAction",
    "TakeAction",
    "describe_action",
    "MoveGenerator",
    "calculate_legal_moves",
    "calculate_splits",
    "enumerate_moves",
    "PoolUnderflowError",
    "Reducer",
    "apply_move",
    "apply_move_unchecked",
    "check_move",
    "NimberCache",
    "clear_cache",
    "default_cache",
    "NimberEvaluator",
    "PoolNotSupportedError",
    "calculate_game_nimber",
    "calculate_nimber_for_height",
    "estimate_evaluation_moves",
]
