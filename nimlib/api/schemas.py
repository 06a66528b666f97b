"""
Pydantic Schemas for API - Request/response models for OpenAPI.

Rule sets use the same JSON form as the rule set interchange format
(see nimlib.spec_schema.serialization), so a file produced by
`nimlib make-rule-set` can be posted as-is.

Error Codes:
- NO_SUCH_STACK / NO_SUCH_RULE / INSUFFICIENT_STACK_COINS /
  INSUFFICIENT_PLAYER_COINS / INVALID_SPLIT / INVALID_MOVE: move rejected
- INVALID_RULE_SET: rule set failed validation
- HEIGHT_TOO_LARGE: a stack exceeds the configured evaluation limit
- POOL_NOT_SUPPORTED: nimbers with pool coins are not implemented
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, NonNegativeInt, PositiveInt

from ..engine_core.action import (
    MoveErrorKind,
    NimAction,
    NimSplit,
    PlaceAction,
    TakeAction,
    describe_action,
)
from ..engine_core.state import PoolSide, Stack
from ..spec_schema.serialization import NimRuleModel


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    NO_SUCH_STACK = "NO_SUCH_STACK"
    NO_SUCH_RULE = "NO_SUCH_RULE"
    INSUFFICIENT_STACK_COINS = "INSUFFICIENT_STACK_COINS"
    INSUFFICIENT_PLAYER_COINS = "INSUFFICIENT_PLAYER_COINS"
    INVALID_SPLIT = "INVALID_SPLIT"
    INVALID_MOVE = "INVALID_MOVE"
    INVALID_RULE_SET = "INVALID_RULE_SET"
    HEIGHT_TOO_LARGE = "HEIGHT_TOO_LARGE"
    POOL_NOT_SUPPORTED = "POOL_NOT_SUPPORTED"

    @classmethod
    def from_move_error(cls, kind: MoveErrorKind) -> "ErrorCode":
        return cls(kind.name)


# =============================================================================
# Shared Models
# =============================================================================

class ActionModel(BaseModel):
    """A move, referencing its stack by index."""
    kind: Literal["take", "place"]
    stack_index: NonNegativeInt
    amount: int
    split: Optional[tuple[NonNegativeInt, NonNegativeInt]] = Field(
        None, description="Heights of the two stacks left after a split take"
    )
    source: Optional[Literal["A", "B"]] = Field(
        None, description="Pool to credit (take) or debit (place)"
    )

    @classmethod
    def from_action(cls, action: NimAction) -> "ActionModel":
        if isinstance(action, TakeAction):
            parts = action.split.parts
            return cls(
                kind="take",
                stack_index=action.stack_index,
                amount=action.amount,
                split=(parts[0].height, parts[1].height) if parts else None,
                source=action.source.value if action.source else None,
            )
        return cls(
            kind="place",
            stack_index=action.stack_index,
            amount=action.amount,
            source=action.source.value,
        )

    def to_action(self) -> NimAction:
        """Convert to an engine action. Raises ValueError for unusable shapes."""
        if self.kind == "take":
            split = NimSplit.no()
            if self.split is not None:
                split = NimSplit.yes(Stack(self.split[0]), Stack(self.split[1]))
            source = PoolSide(self.source) if self.source else None
            return TakeAction(self.stack_index, self.amount, split, source)

        if self.source is None:
            raise ValueError("Place actions need a source pool")
        if self.split is not None:
            raise ValueError("Place actions cannot split")
        return PlaceAction(self.stack_index, self.amount, PoolSide(self.source))


class MoveInfo(BaseModel):
    """A legal move with its human-readable description."""
    action: ActionModel
    description: str

    @classmethod
    def from_action(cls, action: NimAction) -> "MoveInfo":
        return cls(action=ActionModel.from_action(action), description=describe_action(action))


class PositionRequest(BaseModel):
    """A position: rules, stack heights and pool sizes."""
    rules: list[NimRuleModel]
    stacks: list[NonNegativeInt] = Field(default_factory=list)
    pool_a: NonNegativeInt = 0
    pool_b: NonNegativeInt = 0


# =============================================================================
# Requests
# =============================================================================

class NimberRequest(BaseModel):
    """Request nimbers for stack heights under a rule set."""
    rules: list[NimRuleModel]
    stacks: list[NonNegativeInt] = Field(..., min_length=1)
    pool_size: NonNegativeInt = 0


class MoveRequest(BaseModel):
    """A position and an action to check or apply."""
    position: PositionRequest
    action: ActionModel


# =============================================================================
# Responses
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SplitsResponse(BaseModel):
    """All ways to split a height into two non-empty stacks."""
    height: NonNegativeInt
    splits: list[tuple[PositiveInt, PositiveInt]]


class NimberResponse(BaseModel):
    """Per-stack nimbers and their XOR."""
    stacks: list[int]
    nimbers: list[int]
    total: int = Field(..., description="XOR of all stack nimbers")
    first_player_wins: bool = Field(..., description="True when the total is non-zero")


class MovesResponse(BaseModel):
    """All legal moves for a position, in generation order."""
    moves: list[MoveInfo]
    count: int


class CheckMoveResponse(BaseModel):
    """Outcome of validating a move."""
    legal: bool
    error_code: Optional[ErrorCode] = None
    error: Optional[str] = None


class ApplyMoveResponse(BaseModel):
    """The position after a move was applied."""
    stacks: list[int]
    pool_a: int
    pool_b: int
    description: str


class ClearCacheResponse(BaseModel):
    """Result of clearing the nimber cache."""
    cleared_entries: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    cached_nimbers: int = 0
