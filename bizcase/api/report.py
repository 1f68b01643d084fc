# =============================================================================
# Report API — Generation, Export and Preview Charts
# =============================================================================
#
# FLOW:
#   1. POST /api/generate-report: form input → LangGraph pipeline → ReportData
#   2. POST /api/report/charts:   ReportData → chart series for the preview
#   3. POST /api/export/{pdf,docx}: ReportData (possibly edited by the
#      client) → file download
#
# Handlers are thin: validation comes from the Pydantic bodies, the work
# lives in agents/ and exporters/. Document rendering is synchronous and
# runs in a worker thread.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from bizcase.agents.pipeline import generate_report
from bizcase.api.errors import error_detail
from bizcase.config import settings
from bizcase.errors import ExportError, ReportGenerationError
from bizcase.exporters.docx_export import DOCX_MEDIA_TYPE, build_docx
from bizcase.exporters.pdf_export import PDF_MEDIA_TYPE, build_pdf
from bizcase.models.report import ReportData
from bizcase.models.requests import BusinessCaseInput
from bizcase.models.responses import ChartsResponse, ErrorResponse
from bizcase.services.charts import build_charts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reports"])

_ERROR_RESPONSES = {
    422: {"model": ErrorResponse, "description": "Invalid request body"},
    500: {"model": ErrorResponse, "description": "Generation or export failed"},
}


# ---------------------------------------------------------------------------
# POST /api/generate-report
# ---------------------------------------------------------------------------


@router.post(
    "/generate-report",
    response_model=ReportData,
    responses=_ERROR_RESPONSES,
    summary="Generate a business case report",
    description=(
        "Computes the financial projections and metrics from the form "
        "input, then asks the selected LLM to draft the narrative sections."
    ),
)
async def generate_report_endpoint(request: BusinessCaseInput) -> ReportData:
    """
    Error handling:
    - Unknown provider / missing API key → 500 "Failed to generate report"
    - LLM request failure → 500 "Failed to generate report"
    - Malformed LLM JSON → 200 with fallback sections (not an error)
    """
    try:
        report = await generate_report(request)
    except (ValueError, ReportGenerationError) as e:
        logger.error("Report generation failed for '%s': %s", request.project_name, e)
        raise HTTPException(
            status_code=500,
            detail=error_detail("Failed to generate report", str(e)),
        ) from e

    if report.generation and report.generation.fallback_sections:
        logger.warning(
            "Report for '%s' uses fallback content for: %s",
            request.project_name, ", ".join(report.generation.fallback_sections),
        )
    return report


# ---------------------------------------------------------------------------
# POST /api/report/charts
# ---------------------------------------------------------------------------


@router.post(
    "/report/charts",
    response_model=ChartsResponse,
    responses={422: _ERROR_RESPONSES[422]},
    summary="Chart series for the report preview",
)
async def charts_endpoint(report: ReportData) -> ChartsResponse:
    return build_charts(report)


# ---------------------------------------------------------------------------
# POST /api/export/pdf and /api/export/docx
# ---------------------------------------------------------------------------


def _render(
    report: ReportData,
    builder: Callable[[ReportData], bytes],
    fmt: str,
) -> bytes:
    try:
        return builder(report)
    except Exception as e:
        raise ExportError(fmt, str(e)) from e


async def _export(
    report: ReportData,
    builder: Callable[[ReportData], bytes],
    fmt: str,
    media_type: str,
) -> Response:
    try:
        content = await asyncio.to_thread(_render, report, builder, fmt)
    except ExportError as e:
        logger.exception("%s export failed for '%s'", fmt.upper(), report.project_name)
        raise HTTPException(
            status_code=500,
            detail=error_detail(f"Failed to generate {e.fmt.upper()}", str(e)),
        ) from e

    filename = f"{settings.export_filename}.{fmt}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post(
    "/export/pdf",
    response_class=Response,
    responses={
        200: {"content": {PDF_MEDIA_TYPE: {}}, "description": "PDF document"},
        **_ERROR_RESPONSES,
    },
    summary="Export a report as PDF",
)
async def export_pdf_endpoint(report: ReportData) -> Response:
    return await _export(report, build_pdf, "pdf", PDF_MEDIA_TYPE)


@router.post(
    "/export/docx",
    response_class=Response,
    responses={
        200: {"content": {DOCX_MEDIA_TYPE: {}}, "description": "Word document"},
        **_ERROR_RESPONSES,
    },
    summary="Export a report as DOCX",
)
async def export_docx_endpoint(report: ReportData) -> Response:
    return await _export(report, build_docx, "docx", DOCX_MEDIA_TYPE)
