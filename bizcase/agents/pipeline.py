# =============================================================================
# Report Pipeline — LangGraph Assembly of a Business Case Report
# =============================================================================
#
# GRAPH TOPOLOGY:
#   START ──▶ project ──▶ draft ──▶ assemble ──▶ END
#
#   project  — deterministic projections, metrics and TCO
#   draft    — LLM narrative sections (writer agent, groups in parallel)
#   assemble — merge into ReportData; computed numbers always win
#
# The graph is linear and compiled once at import. Parallelism lives
# inside the draft node (asyncio.gather over section groups), not in
# graph edges.
# =============================================================================

from __future__ import annotations

import logging

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from bizcase.agents.writer import DraftResult, draft_sections
from bizcase.models.report import (
    FinancialMetrics,
    GenerationInfo,
    ReportData,
    YearlyProjection,
)
from bizcase.models.requests import BusinessCaseInput
from bizcase.services.financials import (
    compute_metrics,
    project_from_input,
    total_cost_of_ownership,
)
from bizcase.services.llm import LLMProvider, get_llm_provider
from bizcase.services.pricing import estimate_cost

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pipeline State Schema
# ---------------------------------------------------------------------------


class ReportState(TypedDict, total=False):
    """
    State that flows through the graph.

    total=False so nodes only return the keys they update.
    """

    # --- Input (set by caller) ---
    data: BusinessCaseInput

    # When set, the draft node uses this provider instead of the cached
    # client for data.llm_provider. Not JSON-serialisable; the graph has
    # no checkpointer.
    llm_override: LLMProvider | None

    # --- Intermediate (set by nodes) ---
    projections: list[YearlyProjection]
    metrics: FinancialMetrics
    total_cost: float
    draft: DraftResult
    provider_type: str

    # --- Output (set by assemble node) ---
    report: ReportData


# ---------------------------------------------------------------------------
# Node Functions
# ---------------------------------------------------------------------------


async def project_node(state: ReportState) -> dict:
    """Compute projections, metrics and total cost of ownership."""
    data = state["data"]
    projections = project_from_input(data)
    metrics = compute_metrics(projections, capex=data.financials.capex)
    total_cost = total_cost_of_ownership(data, projections)

    logger.info(
        "Projected %d years: npv=%.2f, roi=%.2f%%, payback=%s",
        len(projections), metrics.npv, metrics.roi, metrics.payback_period,
    )
    return {
        "projections": projections,
        "metrics": metrics,
        "total_cost": total_cost,
    }


async def draft_node(state: ReportState) -> dict:
    """Ask the LLM for the narrative sections."""
    data = state["data"]
    llm = state.get("llm_override") or get_llm_provider(data.llm_provider)

    draft = await draft_sections(
        data=data,
        projections=state["projections"],
        metrics=state["metrics"],
        total_cost=state["total_cost"],
        llm=llm,
    )
    return {
        "draft": draft,
        "provider_type": getattr(llm, "provider_type", "unknown"),
    }


async def assemble_node(state: ReportState) -> dict:
    """Merge narrative and numbers into the final report."""
    data = state["data"]
    draft = state["draft"]
    sections = draft.sections

    financial_analysis = dict(sections.get("financialAnalysis", {}))
    financial_analysis["metrics"] = state["metrics"]

    report = ReportData.model_validate({
        **sections,
        "projectName": data.project_name,
        "company": data.company,
        "financialProjections": state["projections"],
        "financialAnalysis": financial_analysis,
        "generation": GenerationInfo(
            provider=data.llm_provider,
            model=draft.model,
            input_tokens=draft.input_tokens,
            output_tokens=draft.output_tokens,
            estimated_cost_usd=estimate_cost(
                state.get("provider_type", "unknown"),
                draft.model,
                draft.input_tokens,
                draft.output_tokens,
            ),
            fallback_sections=draft.fallback_groups,
        ),
    })
    return {"report": report}


# ---------------------------------------------------------------------------
# Graph Assembly
# ---------------------------------------------------------------------------

_builder = StateGraph(ReportState)
_builder.add_node("project", project_node)
_builder.add_node("draft", draft_node)
_builder.add_node("assemble", assemble_node)

_builder.add_edge(START, "project")
_builder.add_edge("project", "draft")
_builder.add_edge("draft", "assemble")
_builder.add_edge("assemble", END)

graph = _builder.compile()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def generate_report(
    data: BusinessCaseInput,
    llm: LLMProvider | None = None,
) -> ReportData:
    """
    Run the pipeline for one form submission.

    Args:
        data: Validated business case input.
        llm: Optional provider override; defaults to the cached client
            for data.llm_provider.

    Returns:
        The assembled ReportData.

    Raises:
        ValueError: the selected provider is unknown or has no API key.
        ReportGenerationError: an LLM request failed.
    """
    initial_state: ReportState = {"data": data}
    if llm is not None:
        initial_state["llm_override"] = llm

    logger.info(
        "Generating report: project='%s', provider=%s, years=%d",
        data.project_name, data.llm_provider,
        data.financials.project_timeline_years,
    )

    result = await graph.ainvoke(initial_state)
    return result["report"]
