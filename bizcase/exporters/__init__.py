# =============================================================================
# Exporters Package — Document Renderers
# =============================================================================
#   - formatting.py:  currency/number formatting and the formulas table
#   - docx_export.py: ReportData → DOCX bytes (python-docx)
#   - pdf_export.py:  ReportData → PDF bytes (fpdf2)
# =============================================================================
