# =============================================================================
# API Request Models — Business Case Input
# =============================================================================
#
# The shape of the multi-step form: project identity, a financial block and
# a customer block. FastAPI uses these for body validation (422 on failure),
# and the form helpers reuse them to validate imported form-data files.
#
# Constraints mirror the form's own validation rules: non-negative money
# amounts, minimum string lengths, a 1-10 year horizon and a 0-100% growth
# rate.
# =============================================================================

from typing import Literal

from pydantic import ConfigDict, Field

from bizcase.models import CamelModel

LLMProviderName = Literal["gpt4", "deepseek", "claude"]


class FinancialInputs(CamelModel):
    """Cost side of the business case."""

    project_timeline_years: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Number of years to project",
    )
    capex: float = Field(
        ...,
        ge=0,
        description="Capital expenditure: one-time costs for long-term assets",
    )
    opex: float = Field(
        ...,
        ge=0,
        description="Operating expenditure in year 1 (annual)",
    )
    # Total cost of ownership. Optional; derived from CAPEX + OPEX when absent.
    total_cost: float | None = Field(
        default=None,
        ge=0,
        description="Total cost of ownership over the project timeline",
    )


class CustomerInputs(CamelModel):
    """Revenue side of the business case."""

    initial_count: int = Field(
        ...,
        ge=1,
        description="Number of customers in year 1",
    )
    growth_rate: float = Field(
        ...,
        ge=0,
        le=100,
        description="Expected yearly customer growth, in percent",
    )
    arpu: float = Field(
        ...,
        ge=0,
        description="Average monthly revenue per customer",
    )


class BusinessCaseInput(CamelModel):
    """
    Request body for POST /api/generate-report.

    Example:
        {
            "projectName": "Smart Metering Rollout",
            "company": "Acme Utilities",
            "country": "Germany",
            "industry": "Energy",
            "llmProvider": "gpt4",
            "financials": {"projectTimelineYears": 5, "capex": 250000, "opex": 60000},
            "customers": {"initialCount": 400, "growthRate": 20, "arpu": 35}
        }
    """

    project_name: str = Field(..., min_length=3, max_length=200)
    company: str = Field(..., min_length=2, max_length=200)
    country: str = Field(..., min_length=2, max_length=100)
    industry: str = Field(..., min_length=2, max_length=100)
    llm_provider: LLMProviderName = Field(
        default="gpt4",
        description="LLM used to draft the narrative sections",
    )
    financials: FinancialInputs
    customers: CustomerInputs

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "examples": [
                {
                    "projectName": "Smart Metering Rollout",
                    "company": "Acme Utilities",
                    "country": "Germany",
                    "industry": "Energy",
                    "llmProvider": "gpt4",
                    "financials": {
                        "projectTimelineYears": 5,
                        "capex": 250000,
                        "opex": 60000,
                    },
                    "customers": {
                        "initialCount": 400,
                        "growthRate": 20,
                        "arpu": 35,
                    },
                }
            ]
        },
    )
