"""Pydantic schemas for payloads exchanged with the authentication API."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ResendType = Literal["register", "forgot-password"]


class Message(BaseModel):
    """Plain text envelope used by the auth API and by this service's own replies."""

    message: str


class OTPVerify(BaseModel):
    """Payload used when submitting a received OTP code for account activation."""

    email: str
    otp: str


class OTPRequest(BaseModel):
    """Payload used to request a new OTP for a specific email and flow."""

    email: str
    type: ResendType


class PasswordResetConfirm(BaseModel):
    """Payload used to set a new password with a reset OTP."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    otp: str
    new_password: str = Field(..., alias="newPassword")


class AuthResult(BaseModel):
    """Outcome of a single authentication API call."""

    success: bool
    message: str | None = None

    @classmethod
    def ok(cls, message: str | None = None) -> "AuthResult":
        return cls(success=True, message=message)

    @classmethod
    def failure(cls, message: str) -> "AuthResult":
        return cls(success=False, message=message)
