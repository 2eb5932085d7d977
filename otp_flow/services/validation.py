"""Field validation for the verify-OTP form."""

import re

from otp_flow.core.config import settings
from otp_flow.schemas.otp import FieldErrors, Mode

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def _otp_pattern(length: int) -> re.Pattern[str]:
    return re.compile(rf"[0-9]{{{length}}}")


def validate(
    email: str,
    otp: str,
    password: str,
    confirm_password: str,
    mode: Mode,
    *,
    otp_length: int = settings.OTP_LENGTH,
    password_min_length: int = settings.PASSWORD_MIN_LENGTH,
) -> FieldErrors:
    """Return a fresh mapping of field key to message; empty means valid.

    Password fields are only checked in reset mode, so signup results never
    contain `password` or `confirmPassword` keys.
    """

    errors: FieldErrors = {}

    if not email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.fullmatch(email):
        errors["email"] = "Invalid email"

    if not otp.strip():
        errors["otp"] = "OTP is required"
    elif not _otp_pattern(otp_length).fullmatch(otp):
        errors["otp"] = f"OTP must be {otp_length} digits"

    if mode is Mode.RESET:
        if not password:
            errors["password"] = "Password is required"
        elif len(password) < password_min_length:
            errors["password"] = f"At least {password_min_length} characters"

        if not confirm_password:
            errors["confirmPassword"] = "Please confirm password"
        elif confirm_password != password:
            errors["confirmPassword"] = "Passwords do not match"

    return errors
