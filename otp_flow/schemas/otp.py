"""Pydantic schemas describing the verify-OTP page state and its actions."""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel

FieldErrors = Dict[str, str]


class Mode(str, Enum):
    """Which verification flow a page visit runs."""

    SIGNUP = "signup"
    RESET = "reset"


class NavigationState(BaseModel):
    """State handed over by the previous page (register or forgot-password)."""

    email: str | None = None
    mode: Mode | None = None


class VerifyParams(BaseModel):
    """Resolved entry parameters for one page visit."""

    email: str = ""
    mode: Mode = Mode.RESET


class Navigation(BaseModel):
    """A route change requested by the flow."""

    path: str
    state: Dict[str, Any] = {}


class FieldsUpdate(BaseModel):
    """Partial edit of the page's input fields."""

    email: str | None = None
    otp: str | None = None
    password: str | None = None
    confirm_password: str | None = None


class SessionSnapshot(BaseModel):
    """Read-only view of a verification session; password values are never echoed."""

    session_id: str | None = None
    mode: Mode
    email: str
    otp: str
    field_errors: FieldErrors
    cooldown_seconds: int
    is_submitting: bool
    can_resend: bool
    terminated: bool
    show_password_fields: bool
    title: str
    submit_label: str
    resend_label: str


class ActionResponse(BaseModel):
    """Result of a submit or resend action."""

    accepted: bool
    session: SessionSnapshot
    navigation: Navigation | None = None
