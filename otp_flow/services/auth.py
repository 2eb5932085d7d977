"""Client for the authentication API used by the verify-OTP page."""

from typing import Any, Optional

import httpx
from pydantic import BaseModel

from otp_flow.core.config import settings
from otp_flow.core.logging import get_logger
from otp_flow.schemas.auth import AuthResult, Message, OTPRequest, OTPVerify, PasswordResetConfirm, ResendType
from otp_flow.services.error_channel import ErrorChannel

logger = get_logger(__name__)

GENERIC_FAILURE = "Request failed"
UNREACHABLE = "Unable to reach the authentication service"


def _error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of an error response body."""
    try:
        body: Any = response.json()
    except ValueError:
        return GENERIC_FAILURE
    if isinstance(body, dict):
        for key in ("detail", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return GENERIC_FAILURE


class AuthService:
    """Calls the verify, resend, and reset endpoints and reports outcomes.

    Every call resolves to an `AuthResult`; transport and HTTP errors never
    escape. Failures are also published on the shared error channel so other
    auth pages observe the same latest error.
    """

    def __init__(self, client: httpx.AsyncClient, error_channel: Optional[ErrorChannel] = None):
        """Receive an HTTP client bound to the auth API base URL."""
        self.client = client
        self.error_channel = error_channel

    async def verify_otp(self, email: str, otp: str) -> AuthResult:
        """Activate a newly registered account with its emailed code."""
        return await self._post(settings.AUTH_VERIFY_OTP_PATH, OTPVerify(email=email, otp=otp))

    async def resend_otp(self, email: str, request_type: ResendType) -> AuthResult:
        """Ask the API to email a fresh code for the given flow."""
        return await self._post(settings.AUTH_RESEND_OTP_PATH, OTPRequest(email=email, type=request_type))

    async def reset_password(self, email: str, otp: str, new_password: str) -> AuthResult:
        """Set a new password using the code from the forgot-password email."""
        payload = PasswordResetConfirm(email=email, otp=otp, new_password=new_password)
        return await self._post(settings.AUTH_RESET_PASSWORD_PATH, payload)

    async def _post(self, path: str, payload: BaseModel) -> AuthResult:
        try:
            response = await self.client.post(path, json=payload.model_dump(by_alias=True))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            logger.warning("Auth API %s returned %s: %s", path, exc.response.status_code, message)
            return self._fail(message)
        except httpx.RequestError as exc:
            logger.warning("Auth API %s unreachable: %s", path, exc)
            return self._fail(UNREACHABLE)

        try:
            message = Message.model_validate(response.json()).message
        except ValueError:
            message = None
        return AuthResult.ok(message)

    def _fail(self, message: str) -> AuthResult:
        if self.error_channel is not None:
            self.error_channel.publish(message)
        return AuthResult.failure(message)


def create_http_client() -> httpx.AsyncClient:
    """Build the shared async client pointed at the configured auth API."""
    return httpx.AsyncClient(
        base_url=settings.AUTH_SERVICE_URL,
        timeout=settings.AUTH_SERVICE_TIMEOUT_SECONDS,
        headers={"Accept": "application/json"},
    )
