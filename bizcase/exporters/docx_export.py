# =============================================================================
# DOCX Export — python-docx Renderer
# =============================================================================
#
# Layout (single section, 1-inch margins, Calibri 12pt body):
#   Cover (title, project, company) → page break
#   Executive Summary
#   Financial Analysis: metrics table, projections table, key insights,
#     calculations table, analysis text
#   Market Analysis (5 subsections)
#   Risk Assessment (risks and impacts as bullets, one per line)
#   Implementation Timeline (phases with bold labels, critical path,
#     milestones)
#   Recommendations (strategic, operational, financial)
# =============================================================================

from __future__ import annotations

import io
import logging

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor

from bizcase.exporters.formatting import (
    format_count,
    format_currency,
    formula_rows,
    metric_rows,
)
from bizcase.models.report import ReportData

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

DARK_BLUE = RGBColor(0x1A, 0x3C, 0x5C)
HEADER_FILL = "F2F2F2"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _add_heading(doc: DocxDocument, text: str, level: int = 1) -> None:
    heading = doc.add_heading(text, level=level)
    for run in heading.runs:
        run.font.color.rgb = DARK_BLUE


def _add_text(doc: DocxDocument, text: str) -> None:
    """Body text; blank-line separated paragraphs become separate paragraphs."""
    blocks = [block.strip() for block in text.split("\n\n") if block.strip()]
    for block in blocks or [""]:
        doc.add_paragraph(block)


def _add_bullets(doc: DocxDocument, text: str) -> None:
    """One bullet per non-empty line, leading list markers stripped."""
    for line in text.splitlines():
        item = line.strip().lstrip("-•*").strip()
        if item:
            doc.add_paragraph(item, style="List Bullet")


def _add_labelled(doc: DocxDocument, label: str, value: str) -> None:
    paragraph = doc.add_paragraph()
    paragraph.add_run(f"{label}: ").bold = True
    paragraph.add_run(value)


def _shade(cell, fill: str) -> None:
    properties = cell._tc.get_or_add_tcPr()
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    shading.set(qn("w:fill"), fill)
    properties.append(shading)


def _add_table(
    doc: DocxDocument,
    headers: list[str],
    rows: list[list[str]],
) -> None:
    table = doc.add_table(rows=1, cols=len(headers))
    table.style = "Table Grid"
    for cell, header in zip(table.rows[0].cells, headers, strict=True):
        cell.text = ""
        cell.paragraphs[0].add_run(header).bold = True
        _shade(cell, HEADER_FILL)
    for row in rows:
        cells = table.add_row().cells
        for cell, value in zip(cells, row, strict=True):
            cell.text = value
    doc.add_paragraph()


def _configure(doc: DocxDocument) -> None:
    normal = doc.styles["Normal"]
    normal.font.name = "Calibri"
    normal.font.size = Pt(12)
    for section in doc.sections:
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(1)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _cover(doc: DocxDocument, report: ReportData) -> None:
    for _ in range(6):
        doc.add_paragraph()
    title = doc.add_heading("Business Case Report", level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    if report.project_name:
        project = doc.add_heading(report.project_name, level=1)
        project.alignment = WD_ALIGN_PARAGRAPH.CENTER
    if report.company:
        company = doc.add_paragraph(report.company)
        company.alignment = WD_ALIGN_PARAGRAPH.CENTER
    doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)


def _financials(doc: DocxDocument, report: ReportData) -> None:
    projections = report.financial_projections
    metrics = report.financial_analysis.metrics

    _add_heading(doc, "Financial Analysis", level=1)
    _add_table(
        doc,
        ["Metric", "Value"],
        [list(row) for row in metric_rows(metrics, len(projections))],
    )

    _add_heading(doc, "Financial Projections", level=2)
    _add_table(
        doc,
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

    first, last = projections[0], projections[-1]
    _add_heading(doc, "Key Financial Insights", level=2)
    for insight in (
        f"Revenue Growth: From {format_currency(first.revenue)} "
        f"to {format_currency(last.revenue)}",
        f"Customer Growth: From {format_count(first.customers)} "
        f"to {format_count(last.customers)} customers",
        f"Operating Expenses: From {format_currency(first.opex)} "
        f"to {format_currency(last.opex)}",
    ):
        doc.add_paragraph(insight, style="List Bullet")

    _add_heading(doc, "Financial Calculations", level=2)
    doc.add_paragraph(
        "The following formulas are used to calculate the financial metrics:"
    )
    _add_table(
        doc,
        ["Metric", "Formula", "Description"],
        [list(row) for row in formula_rows(metrics.discount_rate)],
    )

    if report.financial_analysis.analysis:
        _add_heading(doc, "Analysis", level=2)
        _add_text(doc, report.financial_analysis.analysis)


def _market(doc: DocxDocument, report: ReportData) -> None:
    market = report.market_analysis
    _add_heading(doc, "Market Analysis", level=1)
    for title, text in (
        ("Market Size and Potential", market.market_size),
        ("Competitive Analysis", market.competitive_analysis),
        ("Market Trends", market.market_trends),
        ("Growth Opportunities", market.growth_opportunities),
        ("Entry Barriers", market.entry_barriers),
    ):
        _add_heading(doc, title, level=2)
        _add_text(doc, text)


def _risks(doc: DocxDocument, report: ReportData) -> None:
    risk = report.risk_assessment
    _add_heading(doc, "Risk Assessment", level=1)
    _add_heading(doc, "Identified Risks", level=2)
    _add_bullets(doc, risk.risks)
    _add_heading(doc, "Impact Assessment", level=2)
    _add_bullets(doc, risk.impact_assessment)
    for title, text in (
        ("Mitigation Strategies", risk.mitigation_strategies),
        ("Contingency Plans", risk.contingency_plans),
        ("Risk Monitoring Approach", risk.risk_monitoring_approach),
    ):
        _add_heading(doc, title, level=2)
        _add_text(doc, text)


def _timeline(doc: DocxDocument, report: ReportData) -> None:
    timeline = report.implementation_timeline
    _add_heading(doc, "Implementation Timeline", level=1)
    for phase in timeline.phases:
        _add_heading(doc, phase.phase, level=2)
        _add_labelled(doc, "Duration", phase.duration)
        _add_labelled(doc, "Key Activities", phase.key_activities)
        _add_labelled(doc, "Deliverables", phase.deliverables)
    _add_heading(doc, "Critical Path", level=2)
    _add_text(doc, timeline.critical_path)
    _add_heading(doc, "Key Milestones", level=2)
    _add_text(doc, timeline.key_milestones)


def _recommendations(doc: DocxDocument, report: ReportData) -> None:
    recs = report.recommendations
    _add_heading(doc, "Recommendations", level=1)
    for title, text in (
        ("Strategic Recommendations", recs.strategic),
        ("Operational Recommendations", recs.operational),
        ("Financial Recommendations", recs.financial),
    ):
        _add_heading(doc, title, level=2)
        _add_text(doc, text)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_docx(report: ReportData) -> bytes:
    """Render a report as a DOCX file and return its bytes."""
    doc = Document()
    _configure(doc)

    _cover(doc, report)
    _add_heading(doc, "Executive Summary", level=1)
    _add_text(doc, report.executive_summary)
    _financials(doc, report)
    _market(doc, report)
    _risks(doc, report)
    _timeline(doc, report)
    _recommendations(doc, report)

    buffer = io.BytesIO()
    doc.save(buffer)
    data = buffer.getvalue()

    logger.info(
        "DOCX built: project='%s', %d bytes", report.project_name, len(data),
    )
    return data
