#!/usr/bin/env python3
"""
Generate a sample business case report as DOCX and PDF without an LLM.

The report runs through the normal pipeline with an offline provider
that returns no JSON, so every narrative section uses the fallback text
while projections, metrics and charts are fully computed.

Usage:
    python scripts/generate_sample_report.py

Output:
    data/samples/business-case-report.docx
    data/samples/business-case-report.pdf
"""

import asyncio
from pathlib import Path

from bizcase.agents.pipeline import generate_report
from bizcase.config import settings
from bizcase.exporters.docx_export import build_docx
from bizcase.exporters.pdf_export import build_pdf
from bizcase.models.requests import BusinessCaseInput
from bizcase.services.llm import LLMResponse

SAMPLE_INPUT = {
    "projectName": "Smart Metering Rollout",
    "company": "Acme Utilities",
    "country": "Germany",
    "industry": "Energy",
    "llmProvider": "gpt4",
    "financials": {"projectTimelineYears": 5, "capex": 250000, "opex": 60000},
    "customers": {"initialCount": 400, "growthRate": 20, "arpu": 35},
}


class OfflineProvider:
    """Provider that answers without calling any API."""

    provider_type = "offline"

    async def complete(self, messages, system=None, temperature=None, max_tokens=None):
        return LLMResponse(
            content="Narrative generation is disabled for sample reports.",
            model="offline",
            input_tokens=0,
            output_tokens=0,
        )


def generate_samples() -> None:
    data = BusinessCaseInput.model_validate(SAMPLE_INPUT)
    report = asyncio.run(generate_report(data, llm=OfflineProvider()))

    output_dir = Path("data/samples")
    output_dir.mkdir(parents=True, exist_ok=True)

    for suffix, builder in (("docx", build_docx), ("pdf", build_pdf)):
        output_path = output_dir / f"{settings.export_filename}.{suffix}"
        output_path.write_bytes(builder(report))
        print(f"Generated: {output_path} ({output_path.stat().st_size:,} bytes)")


if __name__ == "__main__":
    generate_samples()
