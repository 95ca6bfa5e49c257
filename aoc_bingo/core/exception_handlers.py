"""
Exception handlers for the AoC Bingo API.
"""
import logging
from fastapi import Request, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from aoc_bingo.core.config import settings
from aoc_bingo.core.exceptions import (
    BingoException, InvalidYear, NoCredential, FetchFailed, ParseFailed,
    StorageFailed, NotFound, GameNotFound, IdGenerationExhausted, NoOptions
)

logger = logging.getLogger(__name__)


def create_error_response(status_code: int, detail: str, error_code: str, request: Request) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "error_code": error_code,
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def game_not_found_handler(request: Request, exc: GameNotFound) -> JSONResponse:
    """Handle game not found exceptions."""
    return create_error_response(404, str(exc), "GAME_NOT_FOUND", request)


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return create_error_response(404, str(exc), "NOT_FOUND", request)


async def no_options_handler(request: Request, exc: NoOptions) -> JSONResponse:
    """No square is left to play; distinct from an upstream failure."""
    return create_error_response(404, str(exc), "NO_BINGO_OPTIONS", request)


async def invalid_year_handler(request: Request, exc: InvalidYear) -> JSONResponse:
    return create_error_response(400, str(exc), "INVALID_YEAR", request)


async def no_credential_handler(request: Request, exc: NoCredential) -> JSONResponse:
    return create_error_response(401, str(exc), "NO_CREDENTIAL", request)


async def fetch_failed_handler(request: Request, exc: FetchFailed) -> JSONResponse:
    """Handle upstream transport failures."""
    logger.warning(f"Upstream fetch failed: {exc}")
    return create_error_response(502, str(exc), "UPSTREAM_FETCH_FAILED", request)


async def parse_failed_handler(request: Request, exc: ParseFailed) -> JSONResponse:
    logger.warning(f"Upstream payload rejected: {exc}")
    return create_error_response(502, str(exc), "UPSTREAM_PARSE_FAILED", request)


async def storage_failed_handler(request: Request, exc: StorageFailed) -> JSONResponse:
    """Handle database failures."""
    logger.error(f"Storage failure: {exc}")
    detail = str(exc) if settings.DEBUG else "Storage is unavailable"
    return create_error_response(503, detail, "STORAGE_FAILED", request)


async def id_generation_handler(request: Request, exc: IdGenerationExhausted) -> JSONResponse:
    logger.error(str(exc))
    return create_error_response(503, str(exc), "ID_GENERATION_EXHAUSTED", request)


async def bingo_exception_handler(request: Request, exc: BingoException) -> JSONResponse:
    """Handle generic bingo exceptions."""
    return create_error_response(400, str(exc), "BINGO_ERROR", request)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation errors with better formatting."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(x) for x in error["loc"][1:]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "errors": errors,
            "error_code": "VALIDATION_ERROR",
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    return create_error_response(exc.status_code, exc.detail, f"HTTP_{exc.status_code}", request)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    # Don't expose internal errors in production
    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = "An unexpected error occurred"

    return create_error_response(500, detail, "INTERNAL_ERROR", request)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(GameNotFound, game_not_found_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(NoOptions, no_options_handler)
    app.add_exception_handler(InvalidYear, invalid_year_handler)
    app.add_exception_handler(NoCredential, no_credential_handler)
    app.add_exception_handler(FetchFailed, fetch_failed_handler)
    app.add_exception_handler(ParseFailed, parse_failed_handler)
    app.add_exception_handler(StorageFailed, storage_failed_handler)
    app.add_exception_handler(IdGenerationExhausted, id_generation_handler)
    app.add_exception_handler(BingoException, bingo_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
