"""
FastAPI Application - REST API for nimber evaluation.

Endpoints:
    GET    /api/v1/health            Health check
    GET    /api/v1/splits/{height}   Ways to split a height
    POST   /api/v1/nimber            Nimbers for stack heights
    POST   /api/v1/moves             Legal moves for a position
    POST   /api/v1/moves/check       Validate a move
    POST   /api/v1/moves/apply       Apply a move, return the new position
    DELETE /api/v1/cache             Clear the nimber cache

All responses are JSON with explicit Pydantic schemas.
Run with: uvicorn nimlib.api.app:app
"""

from typing import Optional, Union
import os

from fastapi import FastAPI, Path
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .schemas import (
    ApplyMoveResponse,
    CheckMoveResponse,
    ClearCacheResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    MoveRequest,
    MovesResponse,
    NimberRequest,
    NimberResponse,
    PositionRequest,
    SplitsResponse,
)
from .service import DEFAULT_MAX_HEIGHT, DEFAULT_MAX_MOVES, NimService

# Environment configuration
NIMLIB_ENV = os.getenv("NIMLIB_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
NIMLIB_MAX_HEIGHT = int(os.getenv("NIMLIB_MAX_HEIGHT", str(DEFAULT_MAX_HEIGHT)))
NIMLIB_MAX_MOVES = int(os.getenv("NIMLIB_MAX_MOVES", str(DEFAULT_MAX_MOVES)))

_STATUS_CODES = {
    ErrorCode.POOL_NOT_SUPPORTED: 501,
}


def create_app(service: Optional[NimService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional NimService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="nimlib API",
        description="""
Nimbers and legal moves for generalized Nim games.

Rule sets are JSON arrays such as
`[{"take": {"List": [1, 2, 3]}, "split": "Never"}]`.

## Error Codes

| Code | Description |
|------|-------------|
| `NO_SUCH_STACK` | Stack index out of range |
| `NO_SUCH_RULE` | No rule allows the move |
| `INSUFFICIENT_STACK_COINS` | Stack too small for the take |
| `INSUFFICIENT_PLAYER_COINS` | Pool too small for the place |
| `INVALID_SPLIT` | Split not allowed by any matching rule |
| `INVALID_RULE_SET` | Rule set failed validation |
| `HEIGHT_TOO_LARGE` | Stack above the evaluation limit for the rule set |
| `POOL_NOT_SUPPORTED` | Nimbers with pool coins are not implemented |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or NimService(max_height=NIMLIB_MAX_HEIGHT, max_moves=NIMLIB_MAX_MOVES)

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=_STATUS_CODES.get(error.error_code, 422),
            content=error.model_dump(mode="json"),
        )

    # =========================================================================
    # Evaluation Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/splits/{height}",
        response_model=SplitsResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Evaluation"],
        summary="Ways to split a height into two non-empty stacks",
    )
    async def get_splits(
        height: int = Path(..., ge=0, description="Stack height"),
    ) -> Union[SplitsResponse, JSONResponse]:
        response = api_service.splits(height)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/nimber",
        response_model=NimberResponse,
        responses={
            422: {"model": ErrorResponse, "description": "Invalid rule set or height"},
            501: {"model": ErrorResponse, "description": "Pool coins not supported"},
        },
        tags=["Evaluation"],
        summary="Calculate nimbers for stack heights",
    )
    def calculate_nimbers(request: NimberRequest) -> Union[NimberResponse, JSONResponse]:
        """
        Calculate the nimber of each stack and their XOR.

        A non-zero total means the player to move wins with optimal play.
        """
        response = api_service.nimbers(request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Move Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/moves",
        response_model=MovesResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Moves"],
        summary="List legal moves for a position",
    )
    def list_moves(request: PositionRequest) -> Union[MovesResponse, JSONResponse]:
        response = api_service.moves(request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/moves/check",
        response_model=CheckMoveResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Moves"],
        summary="Validate a move",
    )
    def check_move(request: MoveRequest) -> Union[CheckMoveResponse, JSONResponse]:
        """Rejected moves are reported in the body with legal=false, not as errors."""
        response = api_service.check(request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/moves/apply",
        response_model=ApplyMoveResponse,
        responses={422: {"model": ErrorResponse, "description": "Move rejected"}},
        tags=["Moves"],
        summary="Apply a move and return the new position",
    )
    def apply_move(request: MoveRequest) -> Union[ApplyMoveResponse, JSONResponse]:
        response = api_service.apply(request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.delete(
        "/api/v1/cache",
        response_model=ClearCacheResponse,
        tags=["System"],
        summary="Clear the nimber cache",
    )
    def clear_cache() -> ClearCacheResponse:
        return api_service.clear_cache()

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="nimlib",
            version=__version__,
            cached_nimbers=api_service.cache.size(),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "nimlib API",
            "version": __version__,
            "environment": NIMLIB_ENV,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn nimlib.api.app:app
app = create_app()
