"""Analytics dashboard and site settings."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.models.user import User
from app.services.store import store
from tests.conftest import auth, new_course


def test_dashboard(client: TestClient, admin_token: str, user: User) -> None:
    design = store.create_course(new_course("Figma", category="Design"))
    store.create_course(new_course("Pandas", category="Data Science"))
    enrollment = store.enroll(user.id, design.id)
    store.complete_enrollment(enrollment.id)

    body = client.get("/api/analytics/dashboard", headers=auth(admin_token)).json()
    assert body["total_users"] == 2
    assert body["total_courses"] == 2
    assert body["total_enrollments"] == 1
    assert body["completed_enrollments"] == 1
    assert body["completion_rate"] == 100
    assert sorted(body["courses_by_category"], key=lambda c: c["category"]) == [
        {"category": "Data Science", "count": 1},
        {"category": "Design", "count": 1},
    ]


def test_settings_round_trip(client: TestClient, admin_token: str) -> None:
    current = client.get("/api/settings", headers=auth(admin_token)).json()
    assert current["enable_registration"] is True

    resp = client.put(
        "/api/settings",
        json={"site_name": "LearnHub", "enable_registration": False},
        headers=auth(admin_token),
    )
    assert resp.status_code == 200
    assert resp.json()["site_name"] == "LearnHub"
    assert resp.json()["contact_email"] == current["contact_email"]

    register = client.post(
        "/api/register",
        json={"username": "late", "email": "late@example.com", "password": "secret123"},
    )
    assert register.status_code == 403


def test_settings_reject_bad_email_and_blank_description(
    client: TestClient, admin_token: str
) -> None:
    before = client.get("/api/settings", headers=auth(admin_token)).json()
    for body in ({"contact_email": "not-an-email"}, {"site_description": ""}):
        resp = client.put("/api/settings", json=body, headers=auth(admin_token))
        assert resp.status_code == 422
    assert client.get("/api/settings", headers=auth(admin_token)).json() == before
