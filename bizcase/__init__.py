# =============================================================================
# Business Case Report Generator
# =============================================================================
# Turns business-case inputs (project identity, costs, customer growth) into
# a structured report: deterministic financial projections and metrics plus
# LLM-drafted narrative sections, exportable to DOCX and PDF.
#
# Package structure:
#   bizcase/
#   ├── api/          → FastAPI route handlers (report generation, export,
#   │                    form support)
#   ├── agents/       → LangGraph report pipeline and the narrative writer
#   ├── exporters/    → DOCX (python-docx) and PDF (fpdf2) renderers
#   ├── models/       → Pydantic V2 request/report schemas
#   └── services/     → Financial math, LLM providers, pricing, charts,
#                        form helpers
# =============================================================================
