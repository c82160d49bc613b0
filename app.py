"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from api import router, set_sanitizer
from sanitizer import Sanitizer
from settings import SanitizerSettings


def create_app(settings: SanitizerSettings | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts optional settings for testing; loads them from the
    environment if omitted.
    """
    if settings is None:
        settings = SanitizerSettings()

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    set_sanitizer(Sanitizer(settings))

    app = FastAPI(
        title="Field Sanitizer API",
        description=(
            "Clamps and default-fills constrained integer fields. Each field "
            "carries tag text with optional min, max and def components that "
            "are parsed for the field's integer width and checked for "
            "consistency before the field is touched."
        ),
        version="0.1.0",
    )
    app.include_router(router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
