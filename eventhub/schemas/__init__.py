from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


def blank_to_none(value: Any) -> Any:
    """Read ``""`` as a missing value so typed fields don't reject it."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
