# =============================================================================
# Form Support — Progress Tracking and Form-Data Import
# =============================================================================
# The multi-step form shows how much of it is filled in and lets users
# save their inputs to a JSON file and load them back. Progress is
# computed over ten tracked fields; a number counts as filled when it is
# non-zero, a string when it is not blank.
# =============================================================================

from __future__ import annotations

from typing import Any

from bizcase.models.requests import BusinessCaseInput

# (block, camelCase key, snake_case key); block None = top level
TRACKED_FIELDS: tuple[tuple[str | None, str, str], ...] = (
    (None, "projectName", "project_name"),
    (None, "company", "company"),
    (None, "country", "country"),
    (None, "industry", "industry"),
    ("financials", "projectTimelineYears", "project_timeline_years"),
    ("financials", "capex", "capex"),
    ("financials", "opex", "opex"),
    ("customers", "initialCount", "initial_count"),
    ("customers", "growthRate", "growth_rate"),
    ("customers", "arpu", "arpu"),
)


def is_filled(value: Any) -> bool:
    """Whether a form value counts as filled in."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, dict):
        return any(is_filled(v) for v in value.values())
    return False


def form_progress(data: dict[str, Any]) -> int:
    """Percentage (0-100, rounded) of tracked fields that are filled."""
    filled = 0
    for block, camel, snake in TRACKED_FIELDS:
        source = data if block is None else data.get(block)
        if not isinstance(source, dict):
            continue
        value = source.get(camel, source.get(snake))
        if is_filled(value):
            filled += 1
    return round(filled / len(TRACKED_FIELDS) * 100)


def validate_form_data(data: dict[str, Any]) -> BusinessCaseInput:
    """
    Validate an imported form-data file.

    Raises:
        pydantic.ValidationError: the file does not describe a valid
            business case.
    """
    return BusinessCaseInput.model_validate(data)
