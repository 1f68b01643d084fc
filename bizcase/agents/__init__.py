# =============================================================================
# Agents Package — Report Generation Pipeline
# =============================================================================
#   - pipeline.py: LangGraph graph — project → draft → assemble
#   - writer.py:   LLM drafting of the narrative section groups, JSON
#                  extraction and fallback content
# =============================================================================
