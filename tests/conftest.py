"""Shared fixtures for sanitizer tests."""

from __future__ import annotations

import pytest

from bounds import INT64
from resolver import IntFieldResolver
from sanitizer import Sanitizer
from settings import SanitizerSettings


@pytest.fixture
def settings() -> SanitizerSettings:
    return SanitizerSettings(verify_samples=50)


@pytest.fixture
def sanitizer(settings) -> Sanitizer:
    return Sanitizer(settings)


@pytest.fixture
def skipping_sanitizer() -> Sanitizer:
    """A sanitizer that records bad fields instead of raising."""
    return Sanitizer(SanitizerSettings(on_error="skip", verify_samples=50))


@pytest.fixture
def resolver() -> IntFieldResolver:
    return IntFieldResolver(bounds=INT64)
