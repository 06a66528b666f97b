"""
API Module - HTTP interface to the engine.

Exposes nimber evaluation and move handling via a REST API.
A single NimService owns the nimber cache shared by all requests.
"""

from .schemas import (
    # Requests
    NimberRequest,
    PositionRequest,
    MoveRequest,
    # Responses
    SplitsResponse,
    NimberResponse,
    MovesResponse,
    CheckMoveResponse,
    ApplyMoveResponse,
    ClearCacheResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    ActionModel,
    MoveInfo,
    ErrorCode,
)
from .service import NimService
from .app import create_app

__all__ = [
    # Requests
    "NimberRequest",
    "PositionRequest",
    "MoveRequest",
    # Responses
    "SplitsResponse",
    "NimberResponse",
    "MovesResponse",
    "CheckMoveResponse",
    "ApplyMoveResponse",
    "ClearCacheResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "ActionModel",
    "MoveInfo",
    "ErrorCode",
    # Service
    "NimService",
    "create_app",
]
