# =============================================================================
# Unit Tests — Narrative Writer
# =============================================================================
#
# JSON extraction, per-group parsing with fallback content, and concurrent
# drafting. The LLM is an AsyncMock; no API keys needed.
# =============================================================================

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from bizcase.agents.writer import (
    FALLBACK_SECTIONS,
    SECTION_GROUPS,
    build_context,
    draft_sections,
    extract_json_object,
    parse_group,
)
from bizcase.errors import ReportGenerationError, ReportParseError
from bizcase.models.requests import BusinessCaseInput
from bizcase.services.financials import compute_metrics, project_from_input
from bizcase.services.llm import LLMResponse


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _input() -> BusinessCaseInput:
    return BusinessCaseInput.model_validate({
        "projectName": "Solar Rooftops",
        "company": "SunCo",
        "country": "Spain",
        "industry": "Energy",
        "financials": {"capex": 50000, "opex": 10000, "projectTimelineYears": 3},
        "customers": {"initialCount": 200, "growthRate": 15, "arpu": 25},
    })


OVERVIEW_JSON = {
    "executiveSummary": "SunCo should proceed.",
    "marketAnalysis": {
        "marketSize": "Large",
        "competitiveAnalysis": "Fragmented",
        "marketTrends": "Growing",
        "growthOpportunities": "Commercial roofs",
        "entryBarriers": "Permits",
    },
    "recommendations": {
        "strategic": "Partner with installers",
        "operational": "Standardise kits",
        "financial": "Lease financing",
    },
}

ANALYSIS_JSON = {
    "financialAnalysis": {"analysis": "Strong returns."},
    "riskAssessment": {
        "risks": "Regulation\nSupply chain",
        "impactAssessment": "High\nMedium",
        "mitigationStrategies": "Lobbying",
        "contingencyPlans": "Second supplier",
        "riskMonitoringApproach": "Quarterly review",
    },
    "implementationTimeline": {
        "phases": [
            {"phase": "Pilot", "duration": "3 months",
             "keyActivities": "Install 10 roofs", "deliverables": "Pilot report"},
        ],
        "criticalPath": "Permits then installs",
        "keyMilestones": "First install",
    },
}


def _mock_llm(overview: str, analysis: str, model: str = "gpt-4") -> MagicMock:
    """Provider whose answer depends on which section group is requested."""

    def respond(messages, system=None, **kwargs):
        prompt = messages[0]["content"]
        content = overview if '"executiveSummary"' in prompt else analysis
        return LLMResponse(
            content=content, model=model, input_tokens=100, output_tokens=50,
        )

    llm = MagicMock()
    llm.provider_type = "openai_compatible"
    llm.complete = AsyncMock(side_effect=respond)
    return llm


def _draft(llm):
    data = _input()
    projections = project_from_input(data)
    metrics = compute_metrics(projections, capex=data.financials.capex)
    return _run(draft_sections(
        data=data,
        projections=projections,
        metrics=metrics,
        total_cost=100000,
        llm=llm,
    ))


# ---------------------------------------------------------------------------
# Test: JSON Extraction
# ---------------------------------------------------------------------------


class TestExtractJsonObject:
    """Tests for slicing the JSON object out of an LLM response."""

    def test_plain_json(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_markdown_fences_stripped(self):
        text = 'Here you go:\n```json\n{"a": {"b": 2}}\n```\nThanks!'
        assert extract_json_object(text) == {"a": {"b": 2}}

    def test_no_object_raises(self):
        with pytest.raises(ReportParseError, match="No valid JSON object"):
            extract_json_object("I cannot help with that.")

    def test_invalid_json_raises(self):
        with pytest.raises(ReportParseError, match="Invalid JSON"):
            extract_json_object('{"a": 1,, }')

    def test_reversed_braces_raise(self):
        with pytest.raises(ReportParseError):
            extract_json_object("} nothing here {")


# ---------------------------------------------------------------------------
# Test: Group Parsing
# ---------------------------------------------------------------------------


class TestParseGroup:
    """Tests for validating a group response and filling gaps."""

    def test_complete_overview_kept(self):
        sections = parse_group("overview", json.dumps(OVERVIEW_JSON))
        assert sections == OVERVIEW_JSON

    def test_missing_anchor_raises(self):
        with pytest.raises(ReportParseError, match="executiveSummary"):
            parse_group("overview", json.dumps({"marketAnalysis": {}}))

    def test_missing_fields_filled_from_fallback(self):
        partial = {"executiveSummary": "Short summary."}
        sections = parse_group("overview", json.dumps(partial))
        assert sections["executiveSummary"] == "Short summary."
        assert sections["recommendations"] == FALLBACK_SECTIONS["overview"]["recommendations"]

    def test_unknown_keys_dropped(self):
        payload = {**OVERVIEW_JSON, "financialProjections": [{"year": 1, "revenue": 1}]}
        sections = parse_group("overview", json.dumps(payload))
        assert "financialProjections" not in sections

    def test_list_values_joined_one_per_line(self):
        payload = json.loads(json.dumps(ANALYSIS_JSON))
        payload["riskAssessment"]["risks"] = ["Regulation", "Supply chain"]
        sections = parse_group("analysis", json.dumps(payload))
        assert sections["riskAssessment"]["risks"] == "Regulation\nSupply chain"

    def test_phase_records_normalised(self):
        payload = json.loads(json.dumps(ANALYSIS_JSON))
        payload["implementationTimeline"]["phases"] = [{"phase": "Build"}]
        sections = parse_group("analysis", json.dumps(payload))
        assert sections["implementationTimeline"]["phases"] == [
            {"phase": "Build", "duration": "", "keyActivities": "", "deliverables": ""},
        ]

    def test_empty_phase_list_uses_fallback_phases(self):
        payload = json.loads(json.dumps(ANALYSIS_JSON))
        payload["implementationTimeline"]["phases"] = []
        sections = parse_group("analysis", json.dumps(payload))
        phases = sections["implementationTimeline"]["phases"]
        assert [p["phase"] for p in phases] == ["Planning", "Execution", "Review"]


# ---------------------------------------------------------------------------
# Test: Prompt Context
# ---------------------------------------------------------------------------


class TestBuildContext:

    def test_context_quotes_inputs_and_numbers(self):
        data = _input()
        projections = project_from_input(data)
        metrics = compute_metrics(projections, capex=data.financials.capex)
        context = build_context(data, projections, metrics, total_cost=123456)

        assert "Project Name: Solar Rooftops" in context
        assert "Total Cost of Ownership (TCO): $123,456" in context
        assert "Capital Expenditure (CAPEX): $50,000" in context
        assert '"revenue": 60000' in context
        assert "NPV at 10% discount rate" in context


# ---------------------------------------------------------------------------
# Test: Drafting
# ---------------------------------------------------------------------------


class TestDraftSections:
    """Tests for concurrent group drafting and fallback handling."""

    def test_all_groups_requested(self):
        llm = _mock_llm(json.dumps(OVERVIEW_JSON), json.dumps(ANALYSIS_JSON))
        draft = _draft(llm)

        assert llm.complete.await_count == len(SECTION_GROUPS)
        assert draft.fallback_groups == []
        assert draft.sections["executiveSummary"] == "SunCo should proceed."
        assert draft.sections["riskAssessment"]["contingencyPlans"] == "Second supplier"

    def test_tokens_summed_across_groups(self):
        llm = _mock_llm(json.dumps(OVERVIEW_JSON), json.dumps(ANALYSIS_JSON))
        draft = _draft(llm)
        assert draft.model == "gpt-4"
        assert draft.input_tokens == 200
        assert draft.output_tokens == 100

    def test_system_prompt_sent(self):
        llm = _mock_llm(json.dumps(OVERVIEW_JSON), json.dumps(ANALYSIS_JSON))
        _draft(llm)
        for call in llm.complete.await_args_list:
            assert "business analyst" in call.kwargs["system"]

    def test_malformed_group_uses_fallback(self):
        llm = _mock_llm("Sorry, no JSON today.", json.dumps(ANALYSIS_JSON))
        draft = _draft(llm)

        assert draft.fallback_groups == ["overview"]
        assert draft.sections["executiveSummary"].startswith(
            "The executive summary could not be generated automatically."
        )
        assert draft.sections["riskAssessment"]["risks"] == "Regulation\nSupply chain"

    def test_both_groups_malformed(self):
        llm = _mock_llm("{broken", "also broken}")
        draft = _draft(llm)
        assert sorted(draft.fallback_groups) == ["analysis", "overview"]

    def test_fallback_is_a_copy(self):
        llm = _mock_llm("nope", "nope")
        draft = _draft(llm)
        draft.sections["marketAnalysis"]["marketSize"] = "edited"
        assert FALLBACK_SECTIONS["overview"]["marketAnalysis"]["marketSize"] != "edited"

    def test_request_failure_raises(self):
        llm = MagicMock()
        llm.complete = AsyncMock(side_effect=RuntimeError("connection reset"))
        with pytest.raises(ReportGenerationError, match="connection reset"):
            _draft(llm)
