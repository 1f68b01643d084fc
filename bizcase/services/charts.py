# =============================================================================
# Chart Series — Data Behind the Report Preview
# =============================================================================
#
# The preview shows revenue and customer growth, cumulative cash flow
# (break-even view), revenue against OPEX, and a cost breakdown. The PDF
# exporter draws its bar charts from the same series.
#
# CAPEX is not a field of ReportData; it is recovered from the metrics as
# total cost minus projected OPEX. Reports without metrics (edited on the
# client) get no CAPEX slice and a cumulative curve starting at zero.
# =============================================================================

from __future__ import annotations

from bizcase.models.report import ReportData
from bizcase.models.responses import ChartPoint, ChartSeries, ChartsResponse


def year_label(year: int) -> str:
    return f"Year {year}"


def implied_capex(report: ReportData) -> float:
    """CAPEX implied by the metrics (0 when metrics are absent)."""
    metrics = report.financial_analysis.metrics
    total_opex = sum(p.opex for p in report.financial_projections)
    return max(metrics.total_cost - total_opex, 0.0)


def cumulative_cash_flow(report: ReportData) -> list[ChartPoint]:
    """Cumulative (revenue − OPEX) per year, starting from −CAPEX."""
    metrics = report.financial_analysis.metrics
    if len(metrics.cumulative_cash_flow) == len(report.financial_projections):
        return [
            ChartPoint(label=year_label(point.year), value=point.cumulative)
            for point in metrics.cumulative_cash_flow
        ]

    running = -implied_capex(report)
    points = []
    for p in report.financial_projections:
        running += p.revenue - p.opex
        points.append(ChartPoint(label=year_label(p.year), value=running))
    return points


def cost_breakdown(report: ReportData) -> list[ChartPoint]:
    points = []
    capex = implied_capex(report)
    if capex > 0:
        points.append(ChartPoint(label="CAPEX", value=capex))
    points.extend(
        ChartPoint(label=f"Year {p.year} OPEX", value=p.opex)
        for p in report.financial_projections
    )
    return points


def _series(report: ReportData, name: str, attr: str) -> ChartSeries:
    return ChartSeries(
        name=name,
        points=[
            ChartPoint(label=year_label(p.year), value=getattr(p, attr))
            for p in report.financial_projections
        ],
    )


def build_charts(report: ReportData) -> ChartsResponse:
    """Assemble every preview chart series for a report."""
    return ChartsResponse(
        revenue=_series(report, "Revenue", "revenue"),
        customers=_series(report, "Customers", "customers"),
        opex=_series(report, "Operating Expenses", "opex"),
        cumulative_cash_flow=ChartSeries(
            name="Cumulative Cash Flow",
            points=cumulative_cash_flow(report),
        ),
        cost_breakdown=ChartSeries(
            name="Cost Breakdown",
            points=cost_breakdown(report),
        ),
    )
