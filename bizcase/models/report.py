# =============================================================================
# Report Models — Generated Business Case Report
# =============================================================================
#
# ReportData is both the response of POST /api/generate-report and the
# request body of the export endpoints. The client may hold and edit a
# report before exporting it, so narrative fields default to "" and the
# exporters render whatever is present.
#
# Numbers in financial_projections and financial_analysis.metrics always
# come from services.financials, never from the LLM.
# =============================================================================

from pydantic import Field

from bizcase.models import CamelModel


class YearlyProjection(CamelModel):
    """One row of the projection table (values rounded to whole units)."""

    year: int = Field(ge=1)
    revenue: int
    customers: int
    opex: int


class CashFlowPoint(CamelModel):
    """Cumulative cash flow at the end of a year."""

    year: int
    cash_flow: float
    cumulative: float


class FinancialMetrics(CamelModel):
    """Investment-return metrics derived from the projections."""

    npv: float = 0.0
    irr: float = 0.0
    roi: float = 0.0
    # Years until cumulative cash flow turns positive; None = not reached.
    payback_period: int | None = None
    # First year where revenue covers OPEX; None = not reached.
    break_even_year: int | None = None
    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_investment: float = 0.0
    discount_rate: float = 0.10
    cumulative_cash_flow: list[CashFlowPoint] = Field(default_factory=list)
    operating_margin: list[float] = Field(default_factory=list)


class FinancialAnalysis(CamelModel):
    metrics: FinancialMetrics = Field(default_factory=FinancialMetrics)
    analysis: str = ""


class MarketAnalysis(CamelModel):
    market_size: str = ""
    competitive_analysis: str = ""
    market_trends: str = ""
    growth_opportunities: str = ""
    entry_barriers: str = ""


class RiskAssessment(CamelModel):
    risks: str = ""
    impact_assessment: str = ""
    mitigation_strategies: str = ""
    contingency_plans: str = ""
    risk_monitoring_approach: str = ""


class ImplementationPhase(CamelModel):
    phase: str
    duration: str = ""
    key_activities: str = ""
    deliverables: str = ""


class ImplementationTimeline(CamelModel):
    phases: list[ImplementationPhase] = Field(default_factory=list)
    critical_path: str = ""
    key_milestones: str = ""


class Recommendations(CamelModel):
    strategic: str = ""
    operational: str = ""
    financial: str = ""


class GenerationInfo(CamelModel):
    """How the narrative sections were produced."""

    provider: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost_usd: float | None = Field(
        default=None,
        description="Estimated LLM cost in USD; null when the model is not priced",
    )
    fallback_sections: list[str] = Field(
        default_factory=list,
        description="Section groups that used placeholder text because the "
        "LLM output could not be parsed",
    )


class ReportData(CamelModel):
    """
    The complete business case report.

    Returned by POST /api/generate-report and accepted by the export and
    chart endpoints.
    """

    project_name: str = ""
    company: str = ""
    executive_summary: str = ""
    financial_projections: list[YearlyProjection] = Field(..., min_length=1)
    market_analysis: MarketAnalysis = Field(default_factory=MarketAnalysis)
    financial_analysis: FinancialAnalysis = Field(default_factory=FinancialAnalysis)
    risk_assessment: RiskAssessment = Field(default_factory=RiskAssessment)
    implementation_timeline: ImplementationTimeline = Field(
        default_factory=ImplementationTimeline,
    )
    recommendations: Recommendations = Field(default_factory=Recommendations)
    generation: GenerationInfo | None = None
