# =============================================================================
# Unit Tests — Financial Model
# =============================================================================
#
# Projections and investment metrics. Pure functions, no mocks needed.
#
# Reference case used throughout: 100 customers growing 10%/year, ARPU 10,
# OPEX 1,000 growing 10%/year, CAPEX 5,000, three years:
#
#   year  customers  revenue  opex  cash flow
#     1      100      12000   1000    11000
#     2      110      13200   1100    12100
#     3      121      14520   1210    13310
#
# Discounted at 10% each cash flow is worth exactly 10,000, so NPV = 25,000.
# =============================================================================

from __future__ import annotations

import pytest

from bizcase.models.requests import BusinessCaseInput
from bizcase.services.financials import (
    compute_metrics,
    project_financials,
    project_from_input,
    total_cost_of_ownership,
)


def _reference_projections():
    return project_financials(
        initial_count=100, growth_rate_pct=10, arpu=10, opex=1000, years=3,
    )


def _input(**financials) -> BusinessCaseInput:
    return BusinessCaseInput.model_validate({
        "projectName": "Fleet Telematics",
        "company": "Acme",
        "country": "Germany",
        "industry": "Logistics",
        "financials": {"capex": 5000, "opex": 1000, "projectTimelineYears": 3, **financials},
        "customers": {"initialCount": 100, "growthRate": 10, "arpu": 10},
    })


# ---------------------------------------------------------------------------
# Test: Projections
# ---------------------------------------------------------------------------


class TestProjectFinancials:
    """Tests for the yearly customer/revenue/OPEX projection."""

    def test_reference_rows(self):
        rows = _reference_projections()
        assert [(p.year, p.customers, p.revenue, p.opex) for p in rows] == [
            (1, 100, 12000, 1000),
            (2, 110, 13200, 1100),
            (3, 121, 14520, 1210),
        ]

    def test_default_horizon_is_five_years(self):
        rows = project_financials(initial_count=10, growth_rate_pct=0, arpu=1, opex=0)
        assert len(rows) == 5

    def test_zero_growth_keeps_customers_flat(self):
        rows = project_financials(
            initial_count=250, growth_rate_pct=0, arpu=20, opex=100, years=4,
        )
        assert {p.customers for p in rows} == {250}
        assert {p.revenue for p in rows} == {250 * 20 * 12}

    def test_opex_inflation_is_configurable(self):
        rows = project_financials(
            initial_count=1, growth_rate_pct=0, arpu=0, opex=1000,
            years=3, opex_growth_rate=0.0,
        )
        assert [p.opex for p in rows] == [1000, 1000, 1000]

    def test_compounding_uses_unrounded_series(self):
        # 3, 4.5, 6.75 customers; year 3 compounds from 4.5, not from 5
        rows = project_financials(
            initial_count=3, growth_rate_pct=50, arpu=0, opex=0, years=3,
        )
        assert [p.customers for p in rows] == [3, 5, 7]

    def test_halves_round_up(self):
        rows = project_financials(
            initial_count=3, growth_rate_pct=50, arpu=0, opex=3,
            years=2, opex_growth_rate=0.5,
        )
        assert rows[1].customers == 5
        assert rows[1].opex == 5

    def test_half_of_an_even_number_rounds_up(self):
        # 2.5 would be 2 under round-half-even
        rows = project_financials(
            initial_count=1, growth_rate_pct=0, arpu=2.5 / 12, opex=2.5, years=1,
        )
        assert rows[0].opex == 3

    def test_invalid_horizon_raises(self):
        with pytest.raises(ValueError, match="at least 1 year"):
            project_financials(
                initial_count=1, growth_rate_pct=0, arpu=1, opex=0, years=-1,
            )

    def test_zero_horizon_raises(self):
        with pytest.raises(ValueError, match="at least 1 year"):
            project_financials(
                initial_count=1, growth_rate_pct=0, arpu=1, opex=0, years=0,
            )

    def test_project_from_input_uses_form_blocks(self):
        rows = project_from_input(_input())
        assert len(rows) == 3
        assert rows[0].revenue == 12000


# ---------------------------------------------------------------------------
# Test: Metrics
# ---------------------------------------------------------------------------


class TestComputeMetrics:
    """Tests for NPV, ROI, simplified IRR, payback and margins."""

    def test_reference_metrics(self):
        metrics = compute_metrics(_reference_projections(), capex=5000)

        assert metrics.npv == pytest.approx(25000, abs=0.01)
        assert metrics.total_revenue == 39720
        assert metrics.total_cost == 8310
        assert metrics.total_investment == 5000
        assert metrics.roi == pytest.approx(628.2)
        assert metrics.irr == pytest.approx(209.4)
        assert metrics.payback_period == 1
        assert metrics.break_even_year == 1
        assert metrics.discount_rate == pytest.approx(0.10)

    def test_cumulative_cash_flow_starts_from_minus_capex(self):
        metrics = compute_metrics(_reference_projections(), capex=5000)
        assert [p.cumulative for p in metrics.cumulative_cash_flow] == [
            6000, 18100, 31410,
        ]
        assert [p.cash_flow for p in metrics.cumulative_cash_flow] == [
            11000, 12100, 13310,
        ]

    def test_operating_margin_per_year(self):
        metrics = compute_metrics(_reference_projections(), capex=5000)
        assert metrics.operating_margin[0] == pytest.approx(91.67)
        assert len(metrics.operating_margin) == 3

    def test_payback_not_reached_is_none(self):
        metrics = compute_metrics(_reference_projections(), capex=1_000_000)
        assert metrics.payback_period is None
        assert metrics.npv < 0

    def test_payback_in_later_year(self):
        # Cumulative: -20000 + 11000 = -9000, then +12100 = 3100
        metrics = compute_metrics(_reference_projections(), capex=20000)
        assert metrics.payback_period == 2

    def test_break_even_never_reached(self):
        rows = project_financials(
            initial_count=1, growth_rate_pct=0, arpu=1, opex=1000, years=3,
        )
        metrics = compute_metrics(rows, capex=0)
        assert metrics.break_even_year is None
        assert metrics.payback_period is None

    def test_zero_capex_uses_total_cost_as_investment(self):
        metrics = compute_metrics(_reference_projections(), capex=0)
        assert metrics.total_investment == 3310
        assert metrics.roi == pytest.approx((39720 - 3310) / 3310 * 100, abs=0.01)

    def test_zero_investment_and_revenue_do_not_raise(self):
        rows = project_financials(
            initial_count=1, growth_rate_pct=0, arpu=0, opex=0, years=2,
        )
        metrics = compute_metrics(rows, capex=0)
        assert metrics.roi == 0
        assert metrics.irr == 0
        assert metrics.operating_margin == [0.0, 0.0]
        # revenue 0 >= opex 0
        assert metrics.break_even_year == 1

    def test_custom_discount_rate(self):
        metrics = compute_metrics(_reference_projections(), capex=0, discount_rate=0)
        assert metrics.npv == pytest.approx(11000 + 12100 + 13310)

    def test_empty_projections_raise(self):
        with pytest.raises(ValueError):
            compute_metrics([], capex=0)


# ---------------------------------------------------------------------------
# Test: Total Cost of Ownership
# ---------------------------------------------------------------------------


class TestTotalCostOfOwnership:

    def test_derived_from_capex_and_opex(self):
        data = _input()
        assert total_cost_of_ownership(data, project_from_input(data)) == 8310

    def test_entered_value_wins(self):
        data = _input(totalCost=12345)
        assert total_cost_of_ownership(data, project_from_input(data)) == 12345
