# =============================================================================
# Writer Agent — Narrative Sections of the Report
# =============================================================================
#
# The writer asks the LLM for the qualitative parts of a business case.
# Sections are split into groups, one LLM call per group, and the groups
# are requested concurrently:
#
#   overview — executiveSummary, marketAnalysis, recommendations
#   analysis — financialAnalysis.analysis, riskAssessment,
#              implementationTimeline
#
# Every prompt carries the computed projections and metrics verbatim and
# tells the model not to recalculate them.
#
# FAILURE MODES:
#   - Request failed (network, auth, vendor error) → ReportGenerationError
#     propagates; the route turns it into a 500.
#   - Response is not parseable JSON, or has the wrong shape → the group's
#     fallback content is used and the group is reported in
#     DraftResult.fallback_groups.
#   - Parsed JSON is missing individual fields → those fields are filled
#     from the fallback content.
# =============================================================================

from __future__ import annotations

import asyncio
import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from bizcase.errors import ReportGenerationError, ReportParseError
from bizcase.models import CamelModel
from bizcase.models.report import (
    FinancialAnalysis,
    FinancialMetrics,
    ImplementationTimeline,
    MarketAnalysis,
    Recommendations,
    RiskAssessment,
    YearlyProjection,
)
from bizcase.models.requests import BusinessCaseInput
from bizcase.services.llm import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class DraftResult:
    """Merged narrative sections plus usage across all group calls."""

    sections: dict[str, Any]
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    fallback_groups: list[str] = field(default_factory=list)


class OverviewSections(CamelModel):
    executive_summary: str
    market_analysis: MarketAnalysis
    recommendations: Recommendations


class AnalysisSections(CamelModel):
    financial_analysis: FinancialAnalysis
    risk_assessment: RiskAssessment
    implementation_timeline: ImplementationTimeline


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = (
    "You are a business analyst expert. Respond only with a valid JSON "
    "object containing the requested sections of a business case report. "
    "Do not perform any calculations - use the exact numbers provided. "
    "Do not include any additional text, markdown formatting, or "
    "explanations outside the JSON structure."
)

_GROUP_SHAPES: dict[str, str] = {
    "overview": """{
  "executiveSummary": "2-3 paragraphs summarizing the business case",
  "marketAnalysis": {
    "marketSize": "size and potential of the target market",
    "competitiveAnalysis": "main competitors and positioning",
    "marketTrends": "relevant trends in the industry and country",
    "growthOpportunities": "where the project can grow",
    "entryBarriers": "barriers to entering the market"
  },
  "recommendations": {
    "strategic": "strategic recommendations",
    "operational": "operational recommendations",
    "financial": "financial recommendations"
  }
}""",
    "analysis": """{
  "financialAnalysis": {
    "analysis": "analysis of the return on investment using the metrics provided"
  },
  "riskAssessment": {
    "risks": "key risks, one per line",
    "impactAssessment": "impact of each risk, one per line",
    "mitigationStrategies": "how each risk is mitigated",
    "contingencyPlans": "what happens if mitigation fails",
    "riskMonitoringApproach": "how risks are tracked"
  },
  "implementationTimeline": {
    "phases": [
      {"phase": "name", "duration": "e.g. 3 months", "keyActivities": "...", "deliverables": "..."}
    ],
    "criticalPath": "the sequence of activities that determines the duration",
    "keyMilestones": "major milestones"
  }
}""",
}

_GROUP_MODELS: dict[str, type[CamelModel]] = {
    "overview": OverviewSections,
    "analysis": AnalysisSections,
}

# Key that must be present for a group response to be considered usable
_GROUP_ANCHORS: dict[str, str] = {
    "overview": "executiveSummary",
    "analysis": "riskAssessment",
}

SECTION_GROUPS = tuple(_GROUP_SHAPES)


# ---------------------------------------------------------------------------
# Fallback Content
# ---------------------------------------------------------------------------

_UNAVAILABLE = (
    "This section could not be generated automatically. "
    "Regenerate the report or complete this section manually."
)

FALLBACK_SECTIONS: dict[str, dict[str, Any]] = {
    "overview": {
        "executiveSummary": (
            "The executive summary could not be generated automatically. "
            "The financial projections and metrics in this report were "
            "calculated from the submitted inputs and remain valid."
        ),
        "marketAnalysis": {
            "marketSize": _UNAVAILABLE,
            "competitiveAnalysis": _UNAVAILABLE,
            "marketTrends": _UNAVAILABLE,
            "growthOpportunities": _UNAVAILABLE,
            "entryBarriers": _UNAVAILABLE,
        },
        "recommendations": {
            "strategic": _UNAVAILABLE,
            "operational": _UNAVAILABLE,
            "financial": _UNAVAILABLE,
        },
    },
    "analysis": {
        "financialAnalysis": {
            "analysis": (
                "Refer to the financial metrics table for NPV, IRR, ROI and "
                "payback period calculated from the projections."
            ),
        },
        "riskAssessment": {
            "risks": _UNAVAILABLE,
            "impactAssessment": _UNAVAILABLE,
            "mitigationStrategies": _UNAVAILABLE,
            "contingencyPlans": _UNAVAILABLE,
            "riskMonitoringApproach": _UNAVAILABLE,
        },
        "implementationTimeline": {
            "phases": [
                {
                    "phase": "Planning",
                    "duration": "To be defined",
                    "keyActivities": "Scope, budget and resource planning",
                    "deliverables": "Approved project plan",
                },
                {
                    "phase": "Execution",
                    "duration": "To be defined",
                    "keyActivities": "Build and roll out the solution",
                    "deliverables": "Operational solution",
                },
                {
                    "phase": "Review",
                    "duration": "To be defined",
                    "keyActivities": "Measure results against the business case",
                    "deliverables": "Post-implementation review",
                },
            ],
            "criticalPath": _UNAVAILABLE,
            "keyMilestones": _UNAVAILABLE,
        },
    },
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def draft_sections(
    data: BusinessCaseInput,
    projections: list[YearlyProjection],
    metrics: FinancialMetrics,
    total_cost: float,
    llm: LLMProvider,
) -> DraftResult:
    """
    Draft all narrative section groups concurrently and merge them.

    Args:
        data: The validated form submission.
        projections: Computed yearly projections (quoted in the prompt).
        metrics: Computed financial metrics (quoted in the prompt).
        total_cost: Total cost of ownership shown to the model.
        llm: Provider to call.

    Returns:
        DraftResult whose `sections` dict uses the report's camelCase keys.

    Raises:
        ReportGenerationError: an LLM request failed.
    """
    context = build_context(data, projections, metrics, total_cost)

    logger.info(
        "Drafting %d section groups for project '%s'",
        len(SECTION_GROUPS), data.project_name,
    )

    results = await asyncio.gather(
        *(_draft_group(group, context, llm) for group in SECTION_GROUPS)
    )

    draft = DraftResult(sections={}, model="")
    for group, (sections, response, used_fallback) in zip(
        SECTION_GROUPS, results, strict=True,
    ):
        draft.sections.update(sections)
        draft.model = draft.model or response.model
        draft.input_tokens += response.input_tokens
        draft.output_tokens += response.output_tokens
        if used_fallback:
            draft.fallback_groups.append(group)

    logger.info(
        "Drafting complete: model=%s, tokens=%d+%d, fallbacks=%s",
        draft.model, draft.input_tokens, draft.output_tokens,
        draft.fallback_groups or "none",
    )
    return draft


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Parse the JSON object embedded in an LLM response.

    Everything before the first "{" and after the last "}" is ignored,
    which strips markdown fences and chatty preambles.

    Raises:
        ReportParseError: no object found, or the slice is not valid JSON.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ReportParseError("No valid JSON object found in response")
    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ReportParseError(f"Invalid JSON in response: {e}") from e
    if not isinstance(parsed, dict):
        raise ReportParseError("Response JSON is not an object")
    return parsed


def build_context(
    data: BusinessCaseInput,
    projections: list[YearlyProjection],
    metrics: FinancialMetrics,
    total_cost: float,
) -> str:
    """Format the business case facts shared by every group prompt."""
    projection_rows = [p.model_dump(by_alias=True) for p in projections]
    payback = (
        f"{metrics.payback_period} years"
        if metrics.payback_period is not None
        else f"not reached within {len(projections)} years"
    )
    return (
        f"Project Name: {data.project_name}\n"
        f"Company: {data.company}\n"
        f"Country: {data.country}\n"
        f"Industry: {data.industry}\n\n"
        "Financial Information:\n"
        f"- Project Timeline: {data.financials.project_timeline_years} years\n"
        f"- Total Cost of Ownership (TCO): ${total_cost:,.0f}\n"
        f"- Capital Expenditure (CAPEX): ${data.financials.capex:,.0f}\n"
        f"- Operating Expenditure (OPEX, year 1): ${data.financials.opex:,.0f}\n\n"
        "Customer Information:\n"
        f"- Initial Customer Count: {data.customers.initial_count}\n"
        f"- Growth Rate: {data.customers.growth_rate:g}%\n"
        f"- Average Revenue Per User (ARPU, monthly): ${data.customers.arpu:,.2f}\n\n"
        "Financial Projections (use these exact numbers):\n"
        f"{json.dumps(projection_rows, indent=2)}\n\n"
        "Financial Metrics (use these exact numbers):\n"
        f"- NPV at {metrics.discount_rate:.0%} discount rate: ${metrics.npv:,.2f}\n"
        f"- IRR (simplified): {metrics.irr}%\n"
        f"- ROI: {metrics.roi}%\n"
        f"- Payback Period: {payback}\n"
    )


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


async def _draft_group(
    group: str,
    context: str,
    llm: LLMProvider,
) -> tuple[dict[str, Any], LLMResponse, bool]:
    """Request one section group; returns (sections, response, used_fallback)."""
    user_message = (
        "Generate the following sections of a business case report for "
        "the project below. Your response must be a valid JSON object with "
        "no additional text before or after.\n\n"
        f"{context}\n"
        f"Your response must be a JSON object with this structure:\n"
        f"{_GROUP_SHAPES[group]}\n\n"
        "Requirements:\n"
        "1. Response must be valid JSON with no additional text\n"
        "2. Use the EXACT financial numbers provided above\n"
        "3. Do not perform any calculations\n"
        "4. Focus on analysis and insights in the text sections"
    )

    try:
        response = await llm.complete(
            messages=[{"role": "user", "content": user_message}],
            system=SYSTEM_PROMPT,
        )
    except Exception as e:
        logger.error("LLM request for section group '%s' failed: %s", group, e)
        raise ReportGenerationError(
            f"LLM request for '{group}' sections failed: {e}"
        ) from e

    try:
        sections = parse_group(group, response.content)
        return sections, response, False
    except ReportParseError as e:
        logger.warning(
            "Using fallback content for section group '%s': %s", group, e,
        )
        return copy.deepcopy(FALLBACK_SECTIONS[group]), response, True


def parse_group(group: str, content: str) -> dict[str, Any]:
    """
    Parse and validate one group's response, filling gaps from the fallback.

    Raises:
        ReportParseError: unparseable, missing the group's anchor key, or
            not coercible to the group's schema.
    """
    parsed = extract_json_object(content)
    anchor = _GROUP_ANCHORS[group]
    if not parsed.get(anchor):
        raise ReportParseError(f"Invalid report structure: missing '{anchor}'")

    merged = _merge_with_fallback(parsed, FALLBACK_SECTIONS[group])
    try:
        _GROUP_MODELS[group].model_validate(merged)
    except ValidationError as e:
        raise ReportParseError(
            f"Invalid report structure: {e.error_count()} validation errors"
        ) from e
    return merged


def _merge_with_fallback(parsed: Any, fallback: Any) -> Any:
    """
    Overlay parsed LLM output on the fallback structure.

    Only keys present in the fallback are kept. Empty values fall back;
    lists of strings where text is expected are joined one per line.
    Items of a parsed list of records (timeline phases) are normalised
    field by field with blanks for anything missing.
    """
    if isinstance(fallback, dict):
        if not isinstance(parsed, dict):
            return copy.deepcopy(fallback)
        return {
            key: _merge_with_fallback(parsed.get(key), default)
            for key, default in fallback.items()
        }
    if isinstance(fallback, list):
        if not isinstance(parsed, list) or not parsed:
            return copy.deepcopy(fallback)
        if fallback and isinstance(fallback[0], dict):
            template = dict.fromkeys(fallback[0], "")
            return [_merge_with_fallback(item, template) for item in parsed]
        return parsed
    if isinstance(parsed, str) and parsed.strip():
        return parsed.strip()
    if isinstance(parsed, list) and parsed:
        return "\n".join(str(item) for item in parsed)
    if isinstance(parsed, int | float) and not isinstance(parsed, bool):
        return str(parsed)
    return fallback
