from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bounds import SUPPORTED


class SanitizerSettings(BaseSettings):
    """
    Runtime configuration loaded from SANITIZE_* environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="SANITIZE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Metadata key that holds the tag text, e.g. field(metadata={"san": "min=1"})
    tag_name: str = Field(default="san", min_length=1)
    # Width of plain `int` fields that carry no Bounds marker
    default_bits: int = 64
    # "raise" aborts the record on the first bad field, "skip" records and moves on
    on_error: Literal["raise", "skip"] = "raise"

    # Resolver verification
    verify_resolvers: bool = True
    verify_samples: int = Field(default=500, ge=0)
    verify_seed: int = 0

    log_level: str = "INFO"

    @field_validator("default_bits")
    @classmethod
    def bits_supported(cls, v: int) -> int:
        if v not in SUPPORTED:
            raise ValueError(f"default_bits must be one of {sorted(SUPPORTED)}, got {v}")
        return v
