# =============================================================================
# Export Formatting — Numbers, Currency and the Formulas Table
# =============================================================================

from __future__ import annotations

from bizcase.config import settings
from bizcase.models.report import FinancialMetrics


def format_currency(value: float) -> str:
    """
    "$1.2M" from one million up, otherwise "$12,345".

    Negative amounts keep the sign in front of the dollar symbol.
    """
    sign = "-" if value < 0 else ""
    amount = abs(value)
    if amount >= 1_000_000:
        return f"{sign}${amount / 1_000_000:.1f}M"
    return f"{sign}${amount:,.0f}"


def format_compact(value: float) -> str:
    """Axis-style numbers: "1.2M", "3.4K", or the plain value below 1,000."""
    sign = "-" if value < 0 else ""
    amount = abs(value)
    if amount >= 1_000_000:
        return f"{sign}{amount / 1_000_000:.1f}M"
    if amount >= 1_000:
        return f"{sign}{amount / 1_000:.1f}K"
    return f"{sign}{amount:g}"


def format_count(value: float) -> str:
    return f"{value:,.0f}"


def format_percent(value: float) -> str:
    """Up to two decimals, thousands separators, trailing zeros dropped."""
    text = f"{value:,.2f}".rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text + "%"


def format_years(value: int | None, horizon: int | None = None) -> str:
    if value is None:
        return f"Not reached within {horizon} years" if horizon else "Not reached"
    return f"{value} year" if value == 1 else f"{value} years"


def metric_rows(metrics: FinancialMetrics, horizon: int) -> list[tuple[str, str]]:
    """(label, formatted value) rows of the financial metrics table."""
    return [
        ("Net Present Value (NPV)", format_currency(metrics.npv)),
        ("Internal Rate of Return (IRR)", format_percent(metrics.irr)),
        ("Return on Investment (ROI)", format_percent(metrics.roi)),
        ("Payback Period", format_years(metrics.payback_period, horizon)),
        ("Break-even Year", format_years(metrics.break_even_year, horizon)),
        ("Total Revenue", format_currency(metrics.total_revenue)),
        ("Total Cost", format_currency(metrics.total_cost)),
    ]


def formula_rows(
    discount_rate: float | None = None,
    opex_growth_rate: float | None = None,
) -> list[tuple[str, str, str]]:
    """
    (metric, formula, description) rows shown in both exports.

    Rates default to the configured ones; pass metrics.discount_rate so the
    table matches the numbers it explains.
    """
    rate = settings.discount_rate if discount_rate is None else discount_rate
    growth = settings.opex_growth_rate if opex_growth_rate is None else opex_growth_rate
    return [
        (
            "Annual Revenue",
            "Customers × ARPU × 12",
            "Monthly ARPU converted to annual revenue",
        ),
        (
            "Customer Growth",
            "Initial Count × (1 + Growth Rate)^(Year - 1)",
            "Compound annual growth rate applied to customer base",
        ),
        (
            "OPEX Growth",
            f"Initial OPEX × ({1 + growth:g})^(Year - 1)",
            f"{format_percent(growth * 100)} annual increase in operating expenses",
        ),
        (
            "Net Present Value (NPV)",
            "Σ (Cash Flow / (1 + r)^t) - Initial Investment",
            "Sum of discounted cash flows minus initial investment, using "
            f"{format_percent(rate * 100)} discount rate",
        ),
        (
            "ROI",
            "((Total Revenue - Total Costs) / Total Investment) × 100",
            "Percentage return on total investment",
        ),
        (
            "IRR",
            "((Total Revenue - Total Costs) / (Investment × Years)) × 100",
            "Simplified internal rate of return calculation",
        ),
        (
            "Payback Period",
            "First year where Cumulative Cash Flow > 0",
            "Time required to recover the initial investment",
        ),
    ]
