# =============================================================================
# Domain Exceptions
# =============================================================================
# Route handlers translate these into the JSON error envelope
# {"error": ..., "details": ...}. Malformed LLM output is NOT surfaced
# through this hierarchy to clients: the writer catches ReportParseError
# and substitutes fallback content.
# =============================================================================


class BusinessCaseError(Exception):
    """Base class for all errors raised by this package."""


class ReportParseError(BusinessCaseError):
    """LLM output could not be parsed into the expected JSON structure."""


class ReportGenerationError(BusinessCaseError):
    """A report could not be produced (LLM request or configuration failed)."""


class ExportError(BusinessCaseError):
    """A document renderer failed to build the requested file."""

    def __init__(self, fmt: str, message: str) -> None:
        super().__init__(message)
        self.fmt = fmt
