from typing import Any, Generator, Tuple

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from otp_flow.api import deps
from otp_flow.main import create_application
from otp_flow.services.error_channel import get_error_channel
from otp_flow.services.sessions import SessionRegistry


@pytest.fixture()
def api_client(make_fake_auth) -> Generator[Tuple[TestClient, Any], None, None]:
    app = create_application()
    fake = make_fake_auth()

    def override_auth_service(
        registry: SessionRegistry = Depends(deps.get_registry),
        client_id: str = Depends(deps.get_client_id),
    ):
        fake.error_channel = registry.channel_for(client_id)
        return fake

    app.dependency_overrides[deps.get_auth_service] = override_auth_service
    with TestClient(app) as client:
        yield client, fake


def _enter(client: TestClient, query: str = "", state: dict | None = None) -> dict:
    response = client.post(f"/verify-otp{query}", json=state)
    assert response.status_code == 201
    return response.json()


def test_healthcheck(api_client) -> None:
    client, _ = api_client

    assert client.get("/").status_code == 200


def test_enter_page_resolves_state_before_query(api_client) -> None:
    client, _ = api_client

    body = _enter(client, "?email=b@x.com&mode=signup", {"email": "a@x.com"})

    assert body["email"] == "a@x.com"
    assert body["mode"] == "signup"
    assert body["session_id"]
    assert body["cooldown_seconds"] == 0
    assert body["can_resend"] is True


def test_enter_page_without_body_defaults_to_reset(api_client) -> None:
    client, _ = api_client

    body = _enter(client)

    assert body["mode"] == "reset"
    assert body["email"] == ""
    assert body["show_password_fields"] is True


def test_signup_submit_navigates_and_discards_session(api_client) -> None:
    client, fake = api_client
    session_id = _enter(client, "?email=u@test.com&mode=SIGNUP")["session_id"]

    edited = client.patch(f"/verify-otp/{session_id}", json={"otp": "12-34-56"}).json()
    assert edited["otp"] == "123456"

    response = client.post(f"/verify-otp/{session_id}/submit")
    body = response.json()

    assert response.status_code == 200
    assert body["accepted"] is True
    assert body["navigation"] == {"path": "/login", "state": {"verified": True, "email": "u@test.com"}}
    assert fake.names() == ["verify_otp"]
    assert client.get(f"/verify-otp/{session_id}").status_code == 404


def test_reset_mismatch_reports_field_error(api_client) -> None:
    client, fake = api_client
    session_id = _enter(client, state={"email": "u@test.com", "mode": "reset"})["session_id"]
    client.patch(
        f"/verify-otp/{session_id}",
        json={"otp": "123456", "password": "abcdef", "confirm_password": "abcdeg"},
    )

    body = client.post(f"/verify-otp/{session_id}/submit").json()

    assert body["navigation"] is None
    assert body["session"]["field_errors"] == {"confirmPassword": "Passwords do not match"}
    assert fake.calls == []


def test_service_failure_is_shown_and_cleared_on_exit(api_client) -> None:
    client, fake = api_client
    fake.fail("verify_otp", "Invalid or expired verification code.")
    session_id = _enter(client, "?email=u@test.com&mode=signup")["session_id"]
    client.patch(f"/verify-otp/{session_id}", json={"otp": "123456"})

    body = client.post(f"/verify-otp/{session_id}/submit").json()

    assert body["session"]["field_errors"] == {"form": "Invalid or expired verification code."}
    assert get_error_channel().current == "Invalid or expired verification code."

    response = client.delete(f"/verify-otp/{session_id}")
    assert response.status_code == 200
    assert get_error_channel().current is None
    assert client.delete(f"/verify-otp/{session_id}").status_code == 404


def test_resend_starts_cooldown_and_ignores_repeat(api_client) -> None:
    client, fake = api_client
    session_id = _enter(client, "?email=u@test.com")["session_id"]

    first = client.post(f"/verify-otp/{session_id}/resend").json()
    second = client.post(f"/verify-otp/{session_id}/resend").json()

    assert first["accepted"] is True
    assert 0 < first["session"]["cooldown_seconds"] <= 60
    assert first["session"]["resend_label"].startswith("Resend OTP in ")
    assert second["accepted"] is False
    assert fake.calls == [("resend_otp", ("u@test.com", "forgot-password"))]


def test_client_channels_are_isolated(api_client) -> None:
    client, fake = api_client
    fake.fail("resend_otp", "User not found.")
    response = client.post("/verify-otp?email=u@test.com", headers={"X-Client-Id": "tab-1"})
    session_id = response.json()["session_id"]

    client.post(f"/verify-otp/{session_id}/resend", headers={"X-Client-Id": "tab-1"})

    assert get_error_channel().current is None


def test_unknown_session_is_404(api_client) -> None:
    client, _ = api_client

    assert client.get("/verify-otp/missing").status_code == 404
    assert client.post("/verify-otp/missing/submit").status_code == 404
