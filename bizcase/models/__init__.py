# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
# requests.py: what the form submits (BusinessCaseInput and its blocks)
# report.py:   what the service returns and what the exporters render
#
# Wire format is camelCase (the browser form's field names); Python code
# uses snake_case attributes. Both spellings are accepted on input.
# =============================================================================

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising to camelCase and accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
