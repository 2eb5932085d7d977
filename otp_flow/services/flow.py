"""Verify-OTP page controller: owns the session state and drives the auth calls."""

import re
from enum import Enum
from typing import Any, Callable, Dict, Optional

from otp_flow.core.config import settings
from otp_flow.core.logging import get_logger
from otp_flow.schemas.auth import AuthResult, ResendType
from otp_flow.schemas.otp import FieldErrors, FieldsUpdate, Mode, Navigation, SessionSnapshot, VerifyParams
from otp_flow.services.auth import GENERIC_FAILURE, AuthService
from otp_flow.services.cooldown import CooldownTimer
from otp_flow.services.error_channel import ErrorChannel
from otp_flow.services.validation import validate

logger = get_logger(__name__)

Navigator = Callable[[Navigation], None]

_NON_DIGITS = re.compile(r"[^0-9]")


class ActionOutcome(str, Enum):
    """How a submit or resend request ended."""

    IGNORED = "ignored"
    INVALID = "invalid"
    FAILED = "failed"
    SUCCEEDED = "succeeded"
    DISCARDED = "discarded"


def normalize_otp(value: str, length: int = settings.OTP_LENGTH) -> str:
    """Keep only ASCII digits and cut the code to its expected length."""
    return _NON_DIGITS.sub("", value)[:length]


class VerifyOtpFlow:
    """State and actions for one visit of the verify-OTP page.

    The mode is fixed at construction. Only one auth call runs at a time;
    submit and resend are ignored while one is in flight, and resend is also
    ignored while the cooldown is counting down. After `close` the session is
    inert: late auth results are discarded, cooldown ticks stop, and the shared
    error channel is cleared.
    """

    def __init__(
        self,
        params: VerifyParams,
        auth_service: AuthService,
        error_channel: ErrorChannel,
        *,
        navigate: Optional[Navigator] = None,
        cooldown_seconds: int = settings.OTP_RESEND_COOLDOWN_SECONDS,
        tick_interval: float = settings.COOLDOWN_TICK_SECONDS,
        login_path: str = settings.LOGIN_PATH,
    ) -> None:
        self._mode = params.mode
        self.email = params.email
        self.otp = ""
        self.password = ""
        self.confirm_password = ""
        self.field_errors: FieldErrors = {}
        self.is_submitting = False
        self.navigation: Optional[Navigation] = None
        self.terminated = False

        self.auth_service = auth_service
        self.error_channel = error_channel
        self._navigate = navigate
        self._cooldown_seconds = cooldown_seconds
        self._login_path = login_path
        self._timer = CooldownTimer(interval=tick_interval)
        self._unsubscribe = error_channel.subscribe(self._on_channel_error)

        logger.info("Verify page entered in %s mode", self._mode.value)

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def cooldown_seconds(self) -> int:
        return self._timer.remaining

    @property
    def cooldown(self) -> CooldownTimer:
        return self._timer

    @property
    def can_resend(self) -> bool:
        return not self.terminated and not self.is_submitting and self.cooldown_seconds == 0

    # -----------------------
    # Field edits
    # -----------------------
    def set_email(self, value: str) -> None:
        self.email = value

    def set_otp(self, value: str) -> None:
        self.otp = normalize_otp(value)

    def set_password(self, value: str) -> None:
        self.password = value

    def set_confirm_password(self, value: str) -> None:
        self.confirm_password = value

    def update(self, fields: FieldsUpdate) -> None:
        """Apply a partial edit; fields left as None are untouched."""
        if fields.email is not None:
            self.set_email(fields.email)
        if fields.otp is not None:
            self.set_otp(fields.otp)
        if fields.password is not None:
            self.set_password(fields.password)
        if fields.confirm_password is not None:
            self.set_confirm_password(fields.confirm_password)

    # -----------------------
    # Actions
    # -----------------------
    def validate(self) -> FieldErrors:
        """Recompute local errors and replace the current mapping with them."""
        self.field_errors = validate(self.email, self.otp, self.password, self.confirm_password, self._mode)
        return self.field_errors

    async def submit(self) -> ActionOutcome:
        """Validate, then verify the signup code or reset the password."""
        if self.terminated or self.is_submitting:
            logger.debug("Submit ignored (terminated=%s, submitting=%s)", self.terminated, self.is_submitting)
            return ActionOutcome.IGNORED

        if self.validate():
            return ActionOutcome.INVALID

        self.error_channel.clear()
        self.field_errors = {}
        email = self.email

        logger.info("Submitting %s verification", self._mode.value)
        self.is_submitting = True
        try:
            if self._mode is Mode.SIGNUP:
                result = await self.auth_service.verify_otp(email, self.otp)
                state: Dict[str, Any] = {"verified": True, "email": email}
            else:
                result = await self.auth_service.reset_password(email, self.otp, self.password)
                state = {"passwordReset": True, "email": email}
        finally:
            if not self.terminated:
                self.is_submitting = False

        if self.terminated:
            logger.info("Discarding submit result for a closed verify page")
            return self._discard(result)

        if not result.success:
            self._set_form_error(result)
            return ActionOutcome.FAILED

        self._go(Navigation(path=self._login_path, state=state))
        return ActionOutcome.SUCCEEDED

    async def resend(self) -> ActionOutcome:
        """Request a fresh code and restart the cooldown when the API accepts."""
        if not self.can_resend:
            logger.debug("Resend ignored (cooldown=%ss, submitting=%s)", self.cooldown_seconds, self.is_submitting)
            return ActionOutcome.IGNORED

        self.error_channel.clear()
        self.field_errors = {}
        request_type: ResendType = "register" if self._mode is Mode.SIGNUP else "forgot-password"

        logger.info("Resending OTP for %s", request_type)
        self.is_submitting = True
        try:
            result = await self.auth_service.resend_otp(self.email, request_type)
        finally:
            if not self.terminated:
                self.is_submitting = False

        if self.terminated:
            logger.info("Discarding resend result for a closed verify page")
            return self._discard(result)

        if not result.success:
            self._set_form_error(result)
            return ActionOutcome.FAILED

        self._timer.start(self._cooldown_seconds)
        return ActionOutcome.SUCCEEDED

    def close(self) -> None:
        """Tear the session down when the page is left."""
        if self.terminated:
            return
        self.terminated = True
        self._timer.cancel()
        self._unsubscribe()
        self.error_channel.clear()
        logger.info("Verify page closed")

    # -----------------------
    # Presentation
    # -----------------------
    def snapshot(self, session_id: Optional[str] = None) -> SessionSnapshot:
        signup = self._mode is Mode.SIGNUP
        if self.is_submitting:
            submit_label = "Processing..."
        else:
            submit_label = "Verify & Activate" if signup else "Reset password"
        cooldown = self.cooldown_seconds
        return SessionSnapshot(
            session_id=session_id,
            mode=self._mode,
            email=self.email,
            otp=self.otp,
            field_errors=dict(self.field_errors),
            cooldown_seconds=cooldown,
            is_submitting=self.is_submitting,
            can_resend=self.can_resend,
            terminated=self.terminated,
            show_password_fields=not signup,
            title="Verify OTP (Sign up)" if signup else "Verify OTP (Reset password)",
            submit_label=submit_label,
            resend_label=f"Resend OTP in {cooldown}s" if cooldown > 0 else "Resend OTP",
        )

    # -----------------------
    # Internals
    # -----------------------
    def _on_channel_error(self, message: Optional[str]) -> None:
        if message:
            self.field_errors["form"] = message

    def _discard(self, result: AuthResult) -> ActionOutcome:
        # keep a late failure off the next page visited
        if not result.success and result.message and self.error_channel.current == result.message:
            self.error_channel.clear()
        return ActionOutcome.DISCARDED

    def _set_form_error(self, result: AuthResult) -> None:
        self.field_errors["form"] = result.message or GENERIC_FAILURE

    def _go(self, navigation: Navigation) -> None:
        self.navigation = navigation
        logger.info("Navigating to %s", navigation.path)
        if self._navigate is not None:
            self._navigate(navigation)
        self.close()
