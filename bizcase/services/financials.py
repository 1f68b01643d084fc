# =============================================================================
# Financial Model — Projections and Investment Metrics
# =============================================================================
#
# Pure functions, no I/O. The numbers computed here are the only numbers
# that appear in a report; the LLM is told to quote them and anything it
# returns in their place is discarded by the pipeline.
#
# PROJECTIONS (year n = 1..N):
#   customers(n) = initial_count × (1 + g)^(n-1)
#   revenue(n)   = customers(n) × ARPU × 12        (ARPU is monthly)
#   opex(n)      = opex × (1 + inflation)^(n-1)    (10% by default)
#
# METRICS:
#   cash_flow(t) = revenue(t) − opex(t)
#   NPV          = Σ cash_flow(t) / (1 + r)^t − CAPEX
#   ROI          = (total revenue − total cost) / investment × 100
#   IRR          = (total revenue − total cost) / (investment × N) × 100
#                  (simplified: average yearly return on investment)
#   payback      = first year whose cumulative cash flow (from −CAPEX) > 0
#
# Projections are rounded for display, but metrics are computed from the
# rounded rows so that a reader can reproduce them from the table.
# =============================================================================

from __future__ import annotations

import logging
import math

from bizcase.config import settings
from bizcase.models.report import CashFlowPoint, FinancialMetrics, YearlyProjection
from bizcase.models.requests import BusinessCaseInput

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------


def round_half_up(value: float) -> int:
    """Nearest whole number, with halves rounded up."""
    return math.floor(value + 0.5)


def project_financials(
    initial_count: int,
    growth_rate_pct: float,
    arpu: float,
    opex: float,
    years: int | None = None,
    opex_growth_rate: float | None = None,
) -> list[YearlyProjection]:
    """
    Project customers, revenue and OPEX for each year of the horizon.

    Args:
        initial_count: Customers in year 1.
        growth_rate_pct: Yearly customer growth in percent (20 means 20%).
        arpu: Average monthly revenue per customer.
        opex: Year-1 operating expenditure.
        years: Horizon length; defaults to settings.default_timeline_years.
        opex_growth_rate: Yearly OPEX inflation as a fraction; defaults to
            settings.opex_growth_rate.

    Returns:
        One YearlyProjection per year, values rounded to whole units.
    """
    horizon = settings.default_timeline_years if years is None else years
    if horizon < 1:
        raise ValueError(f"Projection horizon must be at least 1 year, got {horizon}")

    growth = growth_rate_pct / 100
    inflation = (
        settings.opex_growth_rate if opex_growth_rate is None else opex_growth_rate
    )

    projections: list[YearlyProjection] = []
    customers = float(initial_count)
    yearly_opex = float(opex)

    for year in range(1, horizon + 1):
        revenue = customers * arpu * 12
        projections.append(YearlyProjection(
            year=year,
            revenue=round_half_up(revenue),
            customers=round_half_up(customers),
            opex=round_half_up(yearly_opex),
        ))
        customers *= 1 + growth
        yearly_opex *= 1 + inflation

    return projections


def project_from_input(data: BusinessCaseInput) -> list[YearlyProjection]:
    """Run project_financials() with the blocks of a form submission."""
    return project_financials(
        initial_count=data.customers.initial_count,
        growth_rate_pct=data.customers.growth_rate,
        arpu=data.customers.arpu,
        opex=data.financials.opex,
        years=data.financials.project_timeline_years,
    )


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def compute_metrics(
    projections: list[YearlyProjection],
    capex: float,
    discount_rate: float | None = None,
) -> FinancialMetrics:
    """
    Compute NPV, simplified IRR, ROI, payback and margins.

    Total investment is CAPEX; when CAPEX is zero the total cost is used
    instead so that ROI still relates profit to money spent. Ratios whose
    denominator is zero are reported as 0 rather than raising.
    """
    if not projections:
        raise ValueError("At least one projection year is required")

    rate = settings.discount_rate if discount_rate is None else discount_rate
    years = len(projections)

    total_revenue = float(sum(p.revenue for p in projections))
    total_opex = float(sum(p.opex for p in projections))
    total_cost = capex + total_opex
    total_investment = capex if capex > 0 else total_cost
    net_gain = total_revenue - total_cost

    npv = -capex
    cumulative = -capex
    payback_period: int | None = None
    break_even_year: int | None = None
    cash_flow_points: list[CashFlowPoint] = []
    operating_margin: list[float] = []

    for p in projections:
        cash_flow = p.revenue - p.opex
        npv += cash_flow / (1 + rate) ** p.year
        cumulative += cash_flow
        cash_flow_points.append(CashFlowPoint(
            year=p.year,
            cash_flow=round(cash_flow, 2),
            cumulative=round(cumulative, 2),
        ))
        operating_margin.append(
            round(cash_flow / p.revenue * 100, 2) if p.revenue else 0.0
        )
        if payback_period is None and cumulative > 0:
            payback_period = p.year
        if break_even_year is None and p.revenue >= p.opex:
            break_even_year = p.year

    roi = net_gain / total_investment * 100 if total_investment else 0.0
    irr = net_gain / (total_investment * years) * 100 if total_investment else 0.0

    metrics = FinancialMetrics(
        npv=round(npv, 2),
        irr=round(irr, 2),
        roi=round(roi, 2),
        payback_period=payback_period,
        break_even_year=break_even_year,
        total_revenue=round(total_revenue, 2),
        total_cost=round(total_cost, 2),
        total_investment=round(total_investment, 2),
        discount_rate=rate,
        cumulative_cash_flow=cash_flow_points,
        operating_margin=operating_margin,
    )

    logger.debug(
        "Metrics computed: npv=%.2f irr=%.2f roi=%.2f payback=%s",
        metrics.npv, metrics.irr, metrics.roi, metrics.payback_period,
    )
    return metrics


def total_cost_of_ownership(data: BusinessCaseInput, projections: list[YearlyProjection]) -> float:
    """TCO as entered, or CAPEX plus projected OPEX when the form left it blank."""
    if data.financials.total_cost is not None:
        return data.financials.total_cost
    return data.financials.capex + sum(p.opex for p in projections)
