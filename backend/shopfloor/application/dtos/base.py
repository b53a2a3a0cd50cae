"""Shared DTO configuration: camelCase on the wire, snake_case in Python."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shopfloor.models.base import to_naive_utc


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def blank_to_none(value: Any) -> Any:
    """Treat empty strings in optional update fields as "not provided"."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def naive_utc(value: datetime | None) -> datetime | None:
    return to_naive_utc(value)
