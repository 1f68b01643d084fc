# =============================================================================
# API Response Models — Envelopes and Auxiliary Payloads
# =============================================================================
# The report itself lives in report.py. This module holds the smaller
# payloads: health, error envelope, form progress and chart series.
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field

from bizcase.models import CamelModel


class HealthResponse(BaseModel):
    """Response for GET /health — confirms the API is running."""

    status: str = "ok"
    version: str
    service: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str = Field(description="Short, stable description of the failure")
    details: Any = Field(
        default=None,
        description="Underlying message, or a list of validation problems",
    )


class FormProgressResponse(BaseModel):
    progress: int = Field(ge=0, le=100, description="Percent of tracked fields filled")


class ChartPoint(CamelModel):
    label: str
    value: float


class ChartSeries(CamelModel):
    name: str
    points: list[ChartPoint]


class ChartsResponse(CamelModel):
    """Data behind the preview charts."""

    revenue: ChartSeries
    customers: ChartSeries
    opex: ChartSeries
    cumulative_cash_flow: ChartSeries
    cost_breakdown: ChartSeries
