"""Request context middleware: X-Request-ID on every response."""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/api/user")  # No auth token -> 401
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_summary_line_logged(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="app.middleware.request_context"):
        client.get("/api/courses", headers={"X-Request-ID": "trace-me"})
    records = [r for r in caplog.records if r.name == "app.middleware.request_context"]
    assert records
    assert getattr(records[-1], "request_id", None) == "trace-me"
    assert records[-1].path == "/api/courses"  # type: ignore[attr-defined]
