import json
from typing import Callable, List

import httpx
import pytest

from otp_flow.services.auth import GENERIC_FAILURE, UNREACHABLE, AuthService
from otp_flow.services.error_channel import ErrorChannel


def _service(handler: Callable[[httpx.Request], httpx.Response], channel: ErrorChannel) -> AuthService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://auth.test")
    return AuthService(client, channel)


@pytest.fixture()
def captured() -> List[httpx.Request]:
    return []


@pytest.mark.asyncio
async def test_verify_otp_posts_payload_and_returns_message(captured, channel) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"message": "Account verified successfully."})

    service = _service(handler, channel)
    result = await service.verify_otp("u@test.com", "123456")

    assert result.success
    assert result.message == "Account verified successfully."
    assert captured[0].url.path == "/auth/verify-otp"
    assert json.loads(captured[0].content) == {"email": "u@test.com", "otp": "123456"}
    assert channel.current is None
    await service.client.aclose()


@pytest.mark.asyncio
async def test_resend_sends_request_type(captured, channel) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"message": "A new verification code has been sent."})

    service = _service(handler, channel)
    result = await service.resend_otp("u@test.com", "forgot-password")

    assert result.success
    assert captured[0].url.path == "/auth/resend-otp"
    assert json.loads(captured[0].content) == {"email": "u@test.com", "type": "forgot-password"}
    await service.client.aclose()


@pytest.mark.asyncio
async def test_reset_password_uses_camel_case_new_password(captured, channel) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(204)

    service = _service(handler, channel)
    result = await service.reset_password("u@test.com", "123456", "abcdef")

    assert result.success
    assert result.message is None
    assert captured[0].url.path == "/auth/reset-password"
    assert json.loads(captured[0].content) == {"email": "u@test.com", "otp": "123456", "newPassword": "abcdef"}
    await service.client.aclose()


@pytest.mark.asyncio
async def test_error_detail_becomes_failure_and_is_published(channel) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"detail": "Invalid or expired verification code."})

    service = _service(handler, channel)
    result = await service.verify_otp("u@test.com", "000000")

    assert not result.success
    assert result.message == "Invalid or expired verification code."
    assert channel.current == "Invalid or expired verification code."
    await service.client.aclose()


@pytest.mark.asyncio
async def test_error_message_field_is_also_understood(channel) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "User not found."})

    service = _service(handler, channel)
    result = await service.resend_otp("u@test.com", "register")

    assert result.message == "User not found."
    await service.client.aclose()


@pytest.mark.asyncio
async def test_unparseable_error_body_uses_generic_message(channel) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>")

    service = _service(handler, channel)
    result = await service.verify_otp("u@test.com", "123456")

    assert result.message == GENERIC_FAILURE
    await service.client.aclose()


@pytest.mark.asyncio
async def test_transport_error_is_reported_as_unreachable(channel) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = _service(handler, channel)
    result = await service.reset_password("u@test.com", "123456", "abcdef")

    assert not result.success
    assert result.message == UNREACHABLE
    assert channel.current == UNREACHABLE
    await service.client.aclose()
