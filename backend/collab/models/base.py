"""
Shared pydantic base model.

Python code uses snake_case; JSON bodies use the camelCase names callers send.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CollabModel(BaseModel):
    """Base for every API-facing model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def unwrap_option_value(value: Any) -> Any:
    """
    Resolve a select-style option into its raw value.

    Form widgets send either ``"HIGH"`` or ``{"value": "HIGH", "label": "High"}``.
    """
    if isinstance(value, dict) and "value" in value:
        return value["value"]
    return value
