# =============================================================================
# Form API — Imported Form Data and Completion Progress
# =============================================================================
# The form can be saved to a JSON file and loaded back. /validate checks
# such a file before the client fills the form with it; /progress drives
# the completion bar while the user types. Both take raw JSON so partial
# or malformed data reaches the handler instead of FastAPI's body
# validation.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException
from pydantic import ValidationError

from bizcase.api.errors import error_detail, validation_details
from bizcase.models.requests import BusinessCaseInput
from bizcase.models.responses import ErrorResponse, FormProgressResponse
from bizcase.services.form import form_progress, validate_form_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/form", tags=["Form"])


@router.post(
    "/validate",
    response_model=BusinessCaseInput,
    responses={422: {"model": ErrorResponse, "description": "Invalid form data"}},
    summary="Validate imported form data",
)
async def validate_form_endpoint(
    data: dict[str, Any] = Body(...),
) -> BusinessCaseInput:
    """Return the normalised form input, or 422 with the problems found."""
    try:
        return validate_form_data(data)
    except ValidationError as e:
        details = validation_details(e.errors())
        logger.info("Imported form data rejected: %d problem(s)", len(details))
        raise HTTPException(
            status_code=422,
            detail=error_detail("Invalid request", details),
        ) from e


@router.post(
    "/progress",
    response_model=FormProgressResponse,
    summary="Form completion percentage",
)
async def form_progress_endpoint(
    data: dict[str, Any] = Body(...),
) -> FormProgressResponse:
    return FormProgressResponse(progress=form_progress(data))
