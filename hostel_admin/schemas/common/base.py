"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "BaseSchema",
    "BaseDBSchema",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    Fields are exposed in camelCase to the browser and accepted in either
    camelCase or snake_case.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
        str_strip_whitespace=True,
    )


class BaseDBSchema(BaseSchema):
    """Base schema for database entities with ID and timestamps."""

    id: str = Field(..., description="Unique identifier")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
