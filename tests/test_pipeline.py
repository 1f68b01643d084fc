# =============================================================================
# Unit Tests — Report Pipeline
# =============================================================================
#
# Runs the compiled LangGraph end to end with a mock LLM provider.
# =============================================================================

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bizcase.agents import pipeline
from bizcase.agents.pipeline import generate_report
from bizcase.errors import ReportGenerationError
from bizcase.models.requests import BusinessCaseInput
from bizcase.services.financials import project_from_input
from bizcase.services.llm import LLMResponse


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _input(provider: str = "gpt4") -> BusinessCaseInput:
    return BusinessCaseInput.model_validate({
        "projectName": "Clinic Booking App",
        "company": "HealthCo",
        "country": "Ireland",
        "industry": "Healthcare",
        "llmProvider": provider,
        "financials": {"capex": 5000, "opex": 1000, "projectTimelineYears": 3},
        "customers": {"initialCount": 100, "growthRate": 10, "arpu": 10},
    })


def _llm(content: str, model: str = "gpt-4", provider_type: str = "openai_compatible"):
    llm = MagicMock()
    llm.provider_type = provider_type
    llm.complete = AsyncMock(return_value=LLMResponse(
        content=content, model=model, input_tokens=100, output_tokens=50,
    ))
    return llm


# Every group gets the same answer; each keeps only its own keys.
FULL_RESPONSE = json.dumps({
    "executiveSummary": "Proceed with the booking app.",
    "marketAnalysis": {"marketSize": "EUR 2bn"},
    "recommendations": {"strategic": "Start in Dublin"},
    "financialAnalysis": {
        "analysis": "Payback in year one.",
        "metrics": {"npv": 1, "roi": 2},
    },
    "riskAssessment": {"risks": "Adoption"},
    "implementationTimeline": {
        "phases": [{"phase": "MVP", "duration": "2 months"}],
    },
    "financialProjections": [{"year": 1, "revenue": 999, "customers": 1, "opex": 1}],
})


class TestGenerateReport:
    """Tests for the project → draft → assemble graph."""

    def test_report_carries_computed_projections(self):
        data = _input()
        report = _run(generate_report(data, llm=_llm(FULL_RESPONSE)))

        assert report.financial_projections == project_from_input(data)
        assert report.financial_projections[0].revenue == 12000

    def test_llm_numbers_are_ignored(self):
        report = _run(generate_report(_input(), llm=_llm(FULL_RESPONSE)))
        metrics = report.financial_analysis.metrics
        assert metrics.npv == pytest.approx(25000, abs=0.01)
        assert metrics.roi == pytest.approx(628.2)

    def test_narrative_sections_merged(self):
        report = _run(generate_report(_input(), llm=_llm(FULL_RESPONSE)))

        assert report.project_name == "Clinic Booking App"
        assert report.company == "HealthCo"
        assert report.executive_summary == "Proceed with the booking app."
        assert report.market_analysis.market_size == "EUR 2bn"
        assert report.financial_analysis.analysis == "Payback in year one."
        assert report.implementation_timeline.phases[0].phase == "MVP"

    def test_generation_metadata(self):
        report = _run(generate_report(_input(), llm=_llm(FULL_RESPONSE)))
        info = report.generation

        assert info is not None
        assert info.provider == "gpt4"
        assert info.model == "gpt-4"
        assert info.input_tokens == 200
        assert info.output_tokens == 100
        # 200 × $30/M + 100 × $60/M
        assert info.estimated_cost_usd == pytest.approx(0.012)
        assert info.fallback_sections == []

    def test_unpriced_model_has_no_cost(self):
        llm = _llm(FULL_RESPONSE, model="some-local-model")
        report = _run(generate_report(_input(), llm=llm))
        assert report.generation.estimated_cost_usd is None

    def test_malformed_output_still_produces_report(self):
        report = _run(generate_report(_input(), llm=_llm("not json")))

        assert sorted(report.generation.fallback_sections) == ["analysis", "overview"]
        assert len(report.financial_projections) == 3
        assert len(report.implementation_timeline.phases) == 3

    def test_camel_case_serialisation(self):
        report = _run(generate_report(_input(), llm=_llm(FULL_RESPONSE)))
        body = report.model_dump(by_alias=True)
        assert "executiveSummary" in body
        assert "paybackPeriod" in body["financialAnalysis"]["metrics"]

    def test_provider_resolved_from_input(self):
        llm = _llm(FULL_RESPONSE, model="deepseek-chat")
        with patch.object(pipeline, "get_llm_provider", return_value=llm) as factory:
            report = _run(generate_report(_input(provider="deepseek")))

        factory.assert_called_once_with("deepseek")
        assert report.generation.provider == "deepseek"
        assert report.generation.estimated_cost_usd == pytest.approx(
            200 * 0.14 / 1_000_000 + 100 * 0.28 / 1_000_000,
        )

    def test_missing_api_key_propagates(self):
        with patch.object(
            pipeline, "get_llm_provider", side_effect=ValueError("Set OPENAI_API_KEY"),
        ):
            with pytest.raises(ValueError, match="OPENAI_API_KEY"):
                _run(generate_report(_input()))

    def test_request_failure_propagates(self):
        llm = MagicMock()
        llm.complete = AsyncMock(side_effect=TimeoutError("timed out"))
        with pytest.raises(ReportGenerationError):
            _run(generate_report(_input(), llm=llm))
