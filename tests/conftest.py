import asyncio
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from otp_flow.schemas.auth import AuthResult
from otp_flow.services.error_channel import ErrorChannel, reset_error_channel


class FakeAuthService:
    """Stands in for the auth API client; records calls and returns canned results."""

    def __init__(self, error_channel: Optional[ErrorChannel] = None) -> None:
        self.error_channel = error_channel
        self.calls: List[Tuple[str, tuple]] = []
        self.results: Dict[str, AuthResult] = {
            "verify_otp": AuthResult.ok("Account verified successfully."),
            "resend_otp": AuthResult.ok("A new verification code has been sent."),
            "reset_password": AuthResult.ok("Password updated."),
        }
        self.gate: Optional[asyncio.Event] = None

    def fail(self, name: str, message: str) -> None:
        self.results[name] = AuthResult.failure(message)

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    async def _respond(self, name: str, *args) -> AuthResult:
        self.calls.append((name, args))
        if self.gate is not None:
            await self.gate.wait()
        result = self.results[name]
        if not result.success and self.error_channel is not None:
            self.error_channel.publish(result.message)
        return result

    async def verify_otp(self, email: str, otp: str) -> AuthResult:
        return await self._respond("verify_otp", email, otp)

    async def resend_otp(self, email: str, request_type: str) -> AuthResult:
        return await self._respond("resend_otp", email, request_type)

    async def reset_password(self, email: str, otp: str, new_password: str) -> AuthResult:
        return await self._respond("reset_password", email, otp, new_password)


@pytest.fixture(autouse=True)
def _fresh_shared_channel():
    reset_error_channel()
    yield
    reset_error_channel()


@pytest.fixture()
def channel() -> ErrorChannel:
    return ErrorChannel()


@pytest.fixture()
def fake_auth(channel: ErrorChannel) -> FakeAuthService:
    return FakeAuthService(channel)


@pytest.fixture()
def make_fake_auth() -> Callable[..., FakeAuthService]:
    """Factory for fakes bound to channels chosen later, e.g. per HTTP client."""
    return FakeAuthService
