"""FastAPI endpoints for field resolution.

Routes
------
GET    /health      Liveness check
POST   /resolve     Resolve a single field description
POST   /sanitize    Resolve a named set of fields as one record
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from bounds import for_bits
from errors import SanitizeError
from handles import MappingHandle
from models import (
    ErrorDetail,
    FieldResultModel,
    HealthResponse,
    ResolveRequest,
    ResolveResponse,
    SanitizeRequest,
    SanitizeResponse,
)
from sanitizer import SanitizeReport, Sanitizer

router = APIRouter(tags=["sanitize"])

# The sanitizer instance is injected by the app factory (see app.py).
_sanitizer: Sanitizer | None = None


def set_sanitizer(sanitizer: Sanitizer) -> None:
    """Inject the sanitizer instance. Called once at app startup."""
    global _sanitizer
    _sanitizer = sanitizer


def get_sanitizer() -> Sanitizer:
    assert _sanitizer is not None, "Sanitizer not initialized"
    return _sanitizer


# ---------------------------------------------------------------------------
# Error helpers
# ---------------------------------------------------------------------------

def _constraint_error(e: SanitizeError) -> HTTPException:
    detail = ErrorDetail(error=type(e).__name__, field=e.field, message=str(e))
    return HTTPException(status_code=422, detail=detail.model_dump())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse()


@router.post("/resolve", response_model=ResolveResponse)
def resolve_field(payload: ResolveRequest) -> ResolveResponse:
    """Resolve one field and return its final value."""
    sanitizer = get_sanitizer()
    data = {"value": payload.value}
    handle = MappingHandle(data, "value", optional=payload.optional)
    try:
        result = sanitizer.resolve(handle, payload.tags, for_bits(payload.bits), "value")
    except SanitizeError as e:
        raise _constraint_error(e) from e
    if result.error is not None:
        raise _constraint_error(result.error)
    return ResolveResponse(
        value=data["value"], absent=data["value"] is None, outcome=result.outcome
    )


@router.post("/sanitize", response_model=SanitizeResponse)
def sanitize_fields(payload: SanitizeRequest) -> SanitizeResponse:
    """Resolve every field of a record, honouring the error policy."""
    sanitizer = get_sanitizer()
    if payload.on_error is not None and payload.on_error != sanitizer.settings.on_error:
        settings = sanitizer.settings.model_copy(update={"on_error": payload.on_error})
        sanitizer = Sanitizer(settings)

    values: dict[str, int | None] = {f.name: f.value for f in payload.fields}
    report = SanitizeReport()
    for f in payload.fields:
        handle = MappingHandle(values, f.name, optional=f.optional)
        try:
            sanitizer.resolve(handle, f.tags, for_bits(f.bits), f.name, report)
        except SanitizeError as e:
            raise _constraint_error(e) from e

    results = [
        FieldResultModel(
            field=r.path,
            outcome=r.outcome,
            error=type(r.error).__name__ if r.error else None,
            message=str(r.error) if r.error else None,
        )
        for r in report.results
    ]
    return SanitizeResponse(values=values, results=results)
