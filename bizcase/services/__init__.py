# =============================================================================
# Services Package — Business Logic
# =============================================================================
#   - financials.py: projections, NPV/IRR/ROI/payback (pure functions)
#   - llm.py:        multi-provider LLM abstraction (OpenAI, Deepseek, Claude)
#   - pricing.py:    per-model token pricing for cost estimates
#   - charts.py:     chart series for the report preview and PDF charts
#   - form.py:       form progress and imported form-data validation
# =============================================================================
