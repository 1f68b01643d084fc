# =============================================================================
# PDF Export — fpdf2 Renderer
# =============================================================================
#
# Page flow:
#   1. Title page + executive summary
#   2. Financial charts (revenue, customers, OPEX as bar charts)
#   3. Projections, metrics and formulas tables, financial analysis text
#   4+. Market analysis, risk assessment, implementation timeline,
#       recommendations (automatic page breaks)
#
# The core Helvetica font only covers Latin-1, so every string goes
# through _latin1() before it is written.
# =============================================================================

from __future__ import annotations

import logging

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from bizcase.exporters.formatting import (
    format_compact,
    format_count,
    format_currency,
    formula_rows,
    metric_rows,
)
from bizcase.models.report import ReportData
from bizcase.models.responses import ChartPoint
from bizcase.services.charts import build_charts

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

BAR_COLOR = (135, 206, 235)  # light blue
CHART_HEIGHT = 50

_REPLACEMENTS = {
    "—": "-", "–": "-", "‘": "'", "’": "'",
    "“": '"', "”": '"', "•": "-", "…": "...",
    "Σ": "Sum", "≈": "~", "≤": "<=", "≥": ">=",
    "€": "EUR",
}


def _latin1(text: str) -> str:
    for char, replacement in _REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", "replace").decode("latin-1")


class BusinessCasePDF(FPDF):
    """FPDF with report headers, footers and section helpers."""

    def __init__(self, report_title: str = "") -> None:
        super().__init__()
        self.report_title = _latin1(report_title)

    def header(self):
        if self.page_no() == 1:
            return
        self.set_font("Helvetica", "B", 9)
        self.set_text_color(100, 100, 100)
        self.cell(
            0, 8, self.report_title or "Business Case Report",
            align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.ln(4)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="C")

    def section_title(self, title: str):
        self.set_font("Helvetica", "B", 16)
        self.set_text_color(0, 0, 0)
        self.ln(4)
        self.cell(0, 10, _latin1(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.ln(3)

    def subsection_title(self, title: str):
        self.set_font("Helvetica", "B", 13)
        self.set_text_color(40, 40, 40)
        self.ln(2)
        self.multi_cell(0, 7, _latin1(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def body_text(self, text: str, size: int = 11):
        self.set_font("Helvetica", "", size)
        self.set_text_color(30, 30, 30)
        self.multi_cell(0, 5.5, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(2)

    def labelled_text(self, label: str, value: str):
        """Bold label, then the value as plain text wrapping beside it."""
        self.set_text_color(30, 30, 30)
        caption = _latin1(f"{label}: ")
        self.set_font("Helvetica", "B", 11)
        self.cell(self.get_string_width(caption) + 1, 5.5, caption)
        self.set_font("Helvetica", "", 11)
        self.multi_cell(0, 5.5, _latin1(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def data_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        col_widths: tuple[float, ...] | None = None,
    ):
        self.set_font("Helvetica", "", 9)
        self.set_text_color(0, 0, 0)
        with self.table(
            col_widths=col_widths,
            text_align="LEFT",
            line_height=5,
        ) as table:
            heading = table.row()
            for header in headers:
                heading.cell(_latin1(header))
            for values in rows:
                row = table.row()
                for value in values:
                    row.cell(_latin1(value))
        self.ln(4)

    def bar_chart(self, title: str, points: list[ChartPoint]):
        """Vertical bars scaled to the series maximum, value above each bar."""
        if self.get_y() + CHART_HEIGHT + 30 > self.page_break_trigger:
            self.add_page()
        self.subsection_title(title)

        left = self.l_margin
        width = self.epw
        top = self.get_y() + 6
        baseline = top + CHART_HEIGHT
        max_value = max((p.value for p in points), default=0)

        self.set_draw_color(0, 0, 0)
        self.set_line_width(0.3)
        self.line(left, top, left, baseline)
        self.line(left, baseline, left + width, baseline)

        slot = width / max(len(points), 1)
        bar_width = slot * 0.6
        self.set_font("Helvetica", "", 7)
        self.set_text_color(0, 0, 0)
        self.set_fill_color(*BAR_COLOR)

        for index, point in enumerate(points):
            x = left + index * slot + (slot - bar_width) / 2
            height = (
                point.value / max_value * CHART_HEIGHT
                if max_value > 0 and point.value > 0 else 0
            )
            if height > 0:
                self.rect(x, baseline - height, bar_width, height, style="F")
            self.set_xy(x - 2, baseline - height - 5)
            self.cell(bar_width + 4, 4, format_compact(point.value), align="C")
            self.set_xy(x - 2, baseline + 1)
            self.cell(bar_width + 4, 4, _latin1(point.label), align="C")

        self.set_xy(left, baseline + 10)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_pdf(report: ReportData) -> bytes:
    """Render a report as a PDF file and return its bytes."""
    pdf = BusinessCasePDF(report_title=report.project_name)
    pdf.alias_nb_pages()
    pdf.set_auto_page_break(auto=True, margin=20)

    projections = report.financial_projections
    metrics = report.financial_analysis.metrics

    # =========================================================================
    # Page 1: Title & Executive Summary
    # =========================================================================
    pdf.add_page()
    pdf.ln(20)
    pdf.set_font("Helvetica", "B", 24)
    pdf.cell(0, 15, "Business Case Report", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 16)
    if report.project_name:
        pdf.cell(0, 10, _latin1(report.project_name), align="C",
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    if report.company:
        pdf.cell(0, 10, _latin1(report.company), align="C",
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(10)

    pdf.section_title("Executive Summary")
    pdf.body_text(report.executive_summary)

    # =========================================================================
    # Financial Charts
    # =========================================================================
    charts = build_charts(report)
    pdf.add_page()
    pdf.section_title("Financial Charts")
    pdf.body_text(
        "Note: For detailed interactive charts, please refer to the online "
        "version of this report.",
        size=9,
    )
    pdf.bar_chart("Revenue Growth", charts.revenue.points)
    pdf.bar_chart("Customer Growth", charts.customers.points)
    pdf.bar_chart("Operating Expenses", charts.opex.points)

    # =========================================================================
    # Financial Tables
    # =========================================================================
    pdf.add_page()
    pdf.section_title("Financial Projections")
    pdf.data_table(
        ["Year", "Revenue", "Customers", "OPEX"],
        [
            [
                str(p.year),
                format_currency(p.revenue),
                format_count(p.customers),
                format_currency(p.opex),
            ]
            for p in projections
        ],
    )

    pdf.section_title("Financial Analysis")
    pdf.data_table(
        ["Metric", "Value"],
        [list(row) for row in metric_rows(metrics, len(projections))],
    )
    pdf.subsection_title("Financial Calculations")
    pdf.data_table(
        ["Metric", "Formula", "Description"],
        [list(row) for row in formula_rows(metrics.discount_rate)],
        col_widths=(2, 3, 3),
    )
    if report.financial_analysis.analysis:
        pdf.body_text(report.financial_analysis.analysis)

    # =========================================================================
    # Narrative Sections
    # =========================================================================
    market = report.market_analysis
    pdf.section_title("Market Analysis")
    for title, text in (
        ("Market Size", market.market_size),
        ("Competitive Analysis", market.competitive_analysis),
        ("Market Trends", market.market_trends),
        ("Growth Opportunities", market.growth_opportunities),
        ("Entry Barriers", market.entry_barriers),
    ):
        pdf.subsection_title(title)
        pdf.body_text(text)

    risk = report.risk_assessment
    pdf.section_title("Risk Assessment")
    for title, text in (
        ("Identified Risks", risk.risks),
        ("Impact Assessment", risk.impact_assessment),
        ("Mitigation Strategies", risk.mitigation_strategies),
        ("Contingency Plans", risk.contingency_plans),
        ("Risk Monitoring Approach", risk.risk_monitoring_approach),
    ):
        pdf.subsection_title(title)
        pdf.body_text(text)

    timeline = report.implementation_timeline
    pdf.section_title("Implementation Timeline")
    for phase in timeline.phases:
        pdf.subsection_title(phase.phase)
        pdf.set_font("Helvetica", "", 11)
        pdf.labelled_text("Duration", phase.duration)
        pdf.labelled_text("Key Activities", phase.key_activities)
        pdf.labelled_text("Deliverables", phase.deliverables)
        pdf.ln(2)
    pdf.subsection_title("Critical Path")
    pdf.body_text(timeline.critical_path)
    pdf.subsection_title("Key Milestones")
    pdf.body_text(timeline.key_milestones)

    recs = report.recommendations
    pdf.section_title("Recommendations")
    for title, text in (
        ("Strategic Recommendations", recs.strategic),
        ("Operational Recommendations", recs.operational),
        ("Financial Recommendations", recs.financial),
    ):
        pdf.subsection_title(title)
        pdf.body_text(text)

    data = bytes(pdf.output())
    logger.info(
        "PDF built: project='%s', %d pages, %d bytes",
        report.project_name, pdf.page_no(), len(data),
    )
    return data
