"""Request and response models for the HTTP API.

A field is described by its current value, whether it may be absent,
its tag text and its integer width.  The API resolves such descriptions
with the same per-field entry point the record walker uses.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from bounds import SUPPORTED
from resolver import Outcome


# ---------------------------------------------------------------------------
# Field description
# ---------------------------------------------------------------------------

class FieldInput(BaseModel):
    """One integer field and its constraint tag."""

    value: int | None = None
    optional: bool = False
    tags: str = Field(
        default="",
        max_length=512,
        description="Tag text, e.g. 'min=1,max=10,def=5'",
    )
    bits: int = Field(default=64, description="Signed integer width: 8, 16, 32 or 64")

    @field_validator("bits")
    @classmethod
    def bits_supported(cls, v: int) -> int:
        if v not in SUPPORTED:
            raise ValueError(f"bits must be one of {sorted(SUPPORTED)}, got {v}")
        return v

    @model_validator(mode="after")
    def absent_only_if_optional(self) -> FieldInput:
        if self.value is None and not self.optional:
            raise ValueError("value is required unless the field is optional")
        return self


class NamedFieldInput(FieldInput):
    name: str = Field(..., min_length=1, max_length=128)


# ---------------------------------------------------------------------------
# /resolve
# ---------------------------------------------------------------------------

class ResolveRequest(FieldInput):
    pass


class ResolveResponse(BaseModel):
    value: int | None
    absent: bool
    outcome: Outcome


# ---------------------------------------------------------------------------
# /sanitize
# ---------------------------------------------------------------------------

class SanitizeRequest(BaseModel):
    fields: list[NamedFieldInput] = Field(default_factory=list)
    on_error: Literal["raise", "skip"] | None = None

    @field_validator("fields")
    @classmethod
    def unique_names(cls, fields: list[NamedFieldInput]) -> list[NamedFieldInput]:
        seen: set[str] = set()
        for f in fields:
            if f.name in seen:
                raise ValueError(f"Duplicate field name: {f.name!r}")
            seen.add(f.name)
        return fields


class FieldResultModel(BaseModel):
    field: str
    outcome: Outcome | None = None
    error: str | None = None
    message: str | None = None


class SanitizeResponse(BaseModel):
    values: dict[str, int | None]
    results: list[FieldResultModel]


class ErrorDetail(BaseModel):
    error: str
    field: str
    message: str


class HealthResponse(BaseModel):
    ok: bool = True
