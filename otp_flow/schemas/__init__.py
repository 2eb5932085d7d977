from otp_flow.schemas.auth import AuthResult, Message, OTPRequest, OTPVerify, PasswordResetConfirm
from otp_flow.schemas.otp import (
    ActionResponse,
    FieldsUpdate,
    Mode,
    Navigation,
    NavigationState,
    SessionSnapshot,
    VerifyParams,
)

__all__ = [
    "ActionResponse",
    "AuthResult",
    "FieldsUpdate",
    "Message",
    "Mode",
    "Navigation",
    "NavigationState",
    "OTPRequest",
    "OTPVerify",
    "PasswordResetConfirm",
    "SessionSnapshot",
    "VerifyParams",
]
