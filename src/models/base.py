"""Shared Pydantic base model for LunaLoop schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LunaBase(BaseModel):
    """Base model with shared config for all LunaLoop schemas.

    Fields are snake_case in Python and camelCase on the wire / in the
    persisted JSON (``water_intake`` <-> ``waterIntake``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_store(self) -> dict:
        """Serialize for the key-value store (camelCase, JSON-safe)."""
        return self.model_dump(mode="json", by_alias=True)


class ErrorDetail(BaseModel):
    detail: str
