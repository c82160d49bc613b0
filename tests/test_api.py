"""Tests for the FastAPI endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import create_app
from settings import SanitizerSettings


@pytest.fixture
def client():
    app = create_app(settings=SanitizerSettings(verify_samples=50))
    return TestClient(app)


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


# ---------------------------------------------------------------------------
# POST /resolve
# ---------------------------------------------------------------------------

class TestResolveEndpoint:

    @pytest.mark.parametrize(
        "value, expected, outcome",
        [(3, 5, "clamped_min"), (15, 10, "clamped_max"), (7, 7, "unchanged")],
    )
    def test_clamping(self, client, value, expected, outcome):
        resp = client.post("/resolve", json={"value": value, "tags": "min=5,max=10"})
        assert resp.status_code == 200
        assert resp.json() == {"value": expected, "absent": False, "outcome": outcome}

    def test_absent_with_default(self, client):
        resp = client.post(
            "/resolve", json={"value": None, "optional": True, "tags": "min=1,def=4"}
        )
        assert resp.json() == {"value": 4, "absent": False, "outcome": "defaulted"}

    def test_absent_without_default(self, client):
        resp = client.post("/resolve", json={"optional": True, "tags": "min=1"})
        assert resp.json() == {"value": None, "absent": True, "outcome": "unchanged"}

    def test_absent_plain_field_rejected(self, client):
        resp = client.post("/resolve", json={"tags": "min=1"})
        assert resp.status_code == 422

    def test_unsupported_width_rejected(self, client):
        resp = client.post("/resolve", json={"value": 1, "bits": 12})
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        "tags, error",
        [
            ("min=abc", "ParseError"),
            ("min=10,max=5", "InconsistentBoundsError"),
            ("min=-1", "NegativeBoundError"),
            ("min=5,max=20,def=25", "DefaultExceedsMaxError"),
            ("min=5,max=20,def=1", "DefaultBelowMinError"),
        ],
    )
    def test_constraint_errors(self, client, tags, error):
        resp = client.post("/resolve", json={"value": 1, "tags": tags})
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["error"] == error
        assert detail["field"] == "value"
        assert detail["message"]

    def test_width_applies_to_tags(self, client):
        resp = client.post("/resolve", json={"value": 1, "tags": "max=200", "bits": 8})
        assert resp.status_code == 422
        assert resp.json()["detail"]["error"] == "ParseError"
        resp = client.post("/resolve", json={"value": 500, "tags": "max=200", "bits": 16})
        assert resp.json()["value"] == 200


# ---------------------------------------------------------------------------
# POST /sanitize
# ---------------------------------------------------------------------------

def _record() -> dict:
    return {
        "fields": [
            {"name": "size", "value": 500, "tags": "min=1,max=100"},
            {"name": "offset", "value": None, "optional": True, "tags": "def=0"},
            {"name": "cursor", "value": None, "optional": True, "tags": "min=1"},
        ]
    }


class TestSanitizeEndpoint:

    def test_resolves_all_fields(self, client):
        resp = client.post("/sanitize", json=_record())
        assert resp.status_code == 200
        data = resp.json()
        assert data["values"] == {"size": 100, "offset": 0, "cursor": None}
        assert [r["outcome"] for r in data["results"]] == [
            "clamped_max",
            "defaulted",
            "unchanged",
        ]
        assert all(r["error"] is None for r in data["results"])

    def test_raise_policy_returns_first_error(self, client):
        payload = _record()
        payload["fields"][0]["tags"] = "min=1,max=abc"
        resp = client.post("/sanitize", json=payload)
        assert resp.status_code == 422
        assert resp.json()["detail"] == {
            "error": "ParseError",
            "field": "size",
            "message": "invalid max tag component 'abc' on int64 field 'size'",
        }

    def test_skip_policy_reports_and_continues(self, client):
        payload = _record()
        payload["fields"][0]["tags"] = "min=10,max=5"
        payload["on_error"] = "skip"
        resp = client.post("/sanitize", json=payload)
        assert resp.status_code == 200
        data = resp.json()
        assert data["values"] == {"size": 500, "offset": 0, "cursor": None}
        first = data["results"][0]
        assert first["field"] == "size"
        assert first["outcome"] is None
        assert first["error"] == "InconsistentBoundsError"

    def test_duplicate_names_rejected(self, client):
        payload = _record()
        payload["fields"].append({"name": "size", "value": 1})
        resp = client.post("/sanitize", json=payload)
        assert resp.status_code == 422

    def test_empty_record(self, client):
        resp = client.post("/sanitize", json={})
        assert resp.json() == {"values": {}, "results": []}
