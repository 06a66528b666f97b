"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Owns the nimber cache for every request it serves
3. Turns rejected moves and invalid rule sets into ErrorResponses

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Union

from ..engine_core import (
    NimberCache,
    NimberEvaluator,
    NimGame,
    PoolNotSupportedError,
    Stack,
    apply_move,
    calculate_legal_moves,
    calculate_splits,
    check_move,
    describe_action,
    estimate_evaluation_moves,
)
from ..spec_schema import RuleSet, RuleSetValidationError
from ..spec_schema.serialization import rule_set_from_models
from .schemas import (
    ApplyMoveResponse,
    CheckMoveResponse,
    ClearCacheResponse,
    ErrorCode,
    ErrorResponse,
    MoveInfo,
    MoveRequest,
    MovesResponse,
    NimberRequest,
    NimberResponse,
    PositionRequest,
    SplitsResponse,
)

logger = logging.getLogger("nimlib.api")

DEFAULT_MAX_HEIGHT = 10_000
# Moves generated while filling the cache; a few seconds of work
DEFAULT_MAX_MOVES = 500_000


@dataclass
class NimService:
    """
    Main API service.

    Usage:
        service = NimService()

        response = service.nimbers(NimberRequest(rules=..., stacks=[5, 7]))
        if isinstance(response, ErrorResponse):
            ...
    """
    cache: NimberCache = field(default_factory=NimberCache)
    max_height: int = DEFAULT_MAX_HEIGHT
    max_moves: int = DEFAULT_MAX_MOVES

    def splits(self, height: int) -> Union[SplitsResponse, ErrorResponse]:
        """All ways to split a height into two non-empty stacks."""
        if height > self.max_height:
            return self._height_too_large(height)
        pairs = [(a.height, b.height) for a, b in calculate_splits(height)]
        return SplitsResponse(height=height, splits=pairs)

    def nimbers(self, request: NimberRequest) -> Union[NimberResponse, ErrorResponse]:
        """Nimber of each requested stack, plus their XOR."""
        rules = self._parse_rules(request.rules)
        if isinstance(rules, ErrorResponse):
            return rules

        tallest = max(request.stacks)
        limit = self.height_limit(rules)
        if tallest > limit:
            return self._height_too_large(tallest, limit)

        evaluator = NimberEvaluator(self.cache)
        try:
            nimbers = [
                evaluator.nimber_for_height(height, rules, request.pool_size)
                for height in request.stacks
            ]
        except PoolNotSupportedError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.POOL_NOT_SUPPORTED)

        total = 0
        for nimber in nimbers:
            total ^= int(nimber)

        logger.info(
            "Evaluated %d stack(s) under %d rule(s): total %d",
            len(nimbers), len(rules), total,
        )
        return NimberResponse(
            stacks=list(request.stacks),
            nimbers=[int(n) for n in nimbers],
            total=total,
            first_player_wins=total != 0,
        )

    def moves(self, request: PositionRequest) -> Union[MovesResponse, ErrorResponse]:
        """All legal moves for a position."""
        game = self._build_game(request)
        if isinstance(game, ErrorResponse):
            return game

        moves = calculate_legal_moves(game.stacks, game.rules, game.pool_sizes)
        return MovesResponse(
            moves=[MoveInfo.from_action(m) for m in moves],
            count=len(moves),
        )

    def check(self, request: MoveRequest) -> Union[CheckMoveResponse, ErrorResponse]:
        """Validate a move without applying it."""
        game = self._build_game(request.position)
        if isinstance(game, ErrorResponse):
            return game

        try:
            action = request.action.to_action()
        except ValueError as e:
            return CheckMoveResponse(legal=False, error_code=ErrorCode.INVALID_MOVE, error=str(e))

        result = check_move(game, action)
        if result:
            return CheckMoveResponse(legal=True)
        return CheckMoveResponse(
            legal=False,
            error_code=ErrorCode.from_move_error(result.error_kind),
            error=result.error,
        )

    def apply(self, request: MoveRequest) -> Union[ApplyMoveResponse, ErrorResponse]:
        """Validate and apply a move, returning the new position."""
        game = self._build_game(request.position)
        if isinstance(game, ErrorResponse):
            return game

        try:
            action = request.action.to_action()
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.INVALID_MOVE)

        result = apply_move(game, action)
        if not result:
            return ErrorResponse(
                error=result.error,
                error_code=ErrorCode.from_move_error(result.error_kind),
            )

        return ApplyMoveResponse(
            stacks=game.heights,
            pool_a=game.pool_a,
            pool_b=game.pool_b,
            description=describe_action(action),
        )

    def height_limit(self, rules: RuleSet) -> int:
        """
        Tallest stack nimbers are calculated for under `rules`.

        The plain height limit, lowered until filling the cache up to it
        stays within `max_moves` generated moves.
        """
        low, high = 0, self.max_height
        while low < high:
            middle = (low + high + 1) // 2
            if estimate_evaluation_moves(middle, rules) <= self.max_moves:
                low = middle
            else:
                high = middle - 1
        return low

    def clear_cache(self) -> ClearCacheResponse:
        """Drop every cached nimber."""
        cleared = self.cache.size()
        self.cache.clear()
        logger.info("Cleared %d cached nimber(s)", cleared)
        return ClearCacheResponse(cleared_entries=cleared)

    def _parse_rules(self, models) -> Union[RuleSet, ErrorResponse]:
        try:
            return rule_set_from_models(models)
        except RuleSetValidationError as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.INVALID_RULE_SET,
                details={"errors": e.errors},
            )

    def _build_game(self, position: PositionRequest) -> Union[NimGame, ErrorResponse]:
        rules = self._parse_rules(position.rules)
        if isinstance(rules, ErrorResponse):
            return rules

        tallest = max(position.stacks, default=0)
        if tallest > self.max_height:
            return self._height_too_large(tallest)

        return NimGame(
            rules=rules,
            stacks=[Stack(h) for h in position.stacks],
            pool_a=position.pool_a,
            pool_b=position.pool_b,
        )

    def _height_too_large(self, height: int, limit: int | None = None) -> ErrorResponse:
        limit = self.max_height if limit is None else limit
        return ErrorResponse(
            error=f"Height {height} exceeds the limit of {limit}",
            error_code=ErrorCode.HEIGHT_TOO_LARGE,
            details={"max_height": limit},
        )
