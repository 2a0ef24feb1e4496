from app.schemas.auth import RegistrationRequest, RegistrationResult
from app.schemas.common import Banner, Message
from app.schemas.otp import RegistrationCodeVerify, VerificationView
from app.schemas.recovery import ForgotPasswordRequest, PasswordResetSubmit, RecoveryView, ResetCodeVerify

__all__ = [
    "Banner",
    "ForgotPasswordRequest",
    "Message",
    "PasswordResetSubmit",
    "RecoveryView",
    "RegistrationCodeVerify",
    "RegistrationRequest",
    "RegistrationResult",
    "ResetCodeVerify",
    "VerificationView",
]
