"""Error Handlers — map regcounter failures onto the API error envelope.

Invariants:
    - RegCounterError → its own http_status + to_response(), logged at the level
      its severity names (a 503 while the engine is still loading is a WARNING)
    - A malformed {day} path parameter answers exactly like the engine's own date
      check: 400 INVALID_DATE
    - Any other request validation failure → 400 VALIDATION_ERROR with field details
    - Exception (catch-all) → 500 INTERNAL_ERROR, never leaks internal details

Design Decisions:
    - Days are validated twice (FastAPI's date parsing, then to_date_key in the
      engine); both paths produce one error code so clients handle one contract
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from regcounter.core.errors import ErrorSeverity, InvalidDateError, RegCounterError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}

_DAY_PARAMETER = ("path", "day")


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_regcounter_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _respond(request: Request, exc: RegCounterError) -> JSONResponse:
    logger.log(
        _LOG_LEVELS.get(exc.severity, logging.ERROR),
        f"{exc.code} on {request.url.path}: {exc.message}",
        extra={"error_code": exc.code, "date_key": exc.context.date_key},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_regcounter_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RegCounterError)
    async def regcounter_error_handler(request: Request, exc: RegCounterError):
        return _respond(request, exc)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Bad {day} → INVALID_DATE; anything else → VALIDATION_ERROR."""
        invalid_day = _invalid_day(exc)
        if invalid_day is not None:
            return _respond(request, invalid_day)
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _invalid_day(exc: RequestValidationError) -> InvalidDateError | None:
    for error in exc.errors():
        if tuple(error.get("loc", ())) == _DAY_PARAMETER:
            return InvalidDateError(str(error.get("input", "")))
    return None


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
