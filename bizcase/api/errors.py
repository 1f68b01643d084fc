# =============================================================================
# Error Envelope — Exception Handlers
# =============================================================================
#
# Every non-2xx response body is {"error": str, "details": ...}.
#
#   RequestValidationError → 422, details = [{loc, msg}, ...]
#   HTTPException          → its status; a dict detail with an "error" key
#                            is used as the envelope as-is
#   BusinessCaseError      → 500 (anything a route did not translate)
#   Exception              → 500 "Internal Server Error"
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from bizcase.errors import BusinessCaseError
from bizcase.models.responses import ErrorResponse

logger = logging.getLogger(__name__)


def error_detail(error: str, details: Any = None) -> dict[str, Any]:
    """HTTPException detail that the handler returns unchanged."""
    return ErrorResponse(error=error, details=details).model_dump()


def error_response(status_code: int, error: str, details: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_detail(error, details),
    )


def validation_details(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Reduce pydantic error dicts to {loc, msg} pairs."""
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in errors
    ]


async def validation_exception_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = validation_details(exc.errors())
    logger.warning(
        "Invalid request to %s: %d problem(s)", request.url.path, len(details),
    )
    return error_response(422, "Invalid request", details)


async def http_exception_handler(
    request: Request, exc: HTTPException,
) -> JSONResponse:
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = error_detail(str(exc.detail))
    if exc.status_code >= 500:
        logger.error("HTTP %d for %s: %s", exc.status_code, request.url.path, content)
    else:
        logger.warning("HTTP %d for %s: %s", exc.status_code, request.url.path, content)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def business_case_exception_handler(
    request: Request, exc: BusinessCaseError,
) -> JSONResponse:
    logger.error("Unhandled %s for %s: %s", type(exc).__name__, request.url.path, exc)
    return error_response(500, "Request failed", str(exc))


async def generic_exception_handler(
    request: Request, exc: Exception,
) -> JSONResponse:
    logger.error(
        "Unhandled exception for %s: %s", request.url.path, exc, exc_info=True,
    )
    return error_response(500, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(BusinessCaseError, business_case_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
