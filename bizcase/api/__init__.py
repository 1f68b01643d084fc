# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
#   - report.py: report generation, DOCX/PDF export, preview chart data
#   - form.py:   form-data validation and completion progress
#   - errors.py: JSON error envelope and exception handlers
#   - logging_middleware.py: per-request access logging
# =============================================================================
