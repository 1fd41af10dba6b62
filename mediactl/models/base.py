"""Base model with common configuration for backend payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseModel(PydanticBaseModel):
    """Base model with common configuration.

    Backend payloads use camelCase keys; fields are declared in snake_case
    with aliases and accept either spelling.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump(exclude_none=True)

    def to_payload(self) -> dict[str, Any]:
        """Convert model to a camelCase request body (None values kept)."""
        return self.model_dump(by_alias=True)
