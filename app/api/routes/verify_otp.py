"""HTTP route handlers for sign-up and registration email verification.

The verification screen is reachable with the token as a path segment
(`/verify-otp/{token}`) or as a query parameter (`/verify-otp?token=`); both
forms are handled by the same service call.
"""

from fastapi import APIRouter, Depends, status

from app.api import deps
from app.schemas.auth import RegistrationRequest, RegistrationResult
from app.schemas.common import Message
from app.schemas.otp import RegistrationCodeVerify, VerificationView
from app.services.verification import VerificationService

router = APIRouter(tags=["email verification"])


@router.post("/register", response_model=RegistrationResult, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegistrationRequest,
    session_id: str = Depends(deps.get_session_id),
    service: VerificationService = Depends(deps.get_verification_service),
) -> RegistrationResult:
    """Create the account and remember its verification token for this visitor."""

    return await service.register(session_id, payload)


@router.get("/verify-otp", response_model=VerificationView)
@router.get("/verify-otp/{path_token}", response_model=VerificationView)
async def verification_screen(
    path_token: str | None = None,
    token: str | None = None,
    session_id: str = Depends(deps.get_session_id),
    service: VerificationService = Depends(deps.get_verification_service),
) -> VerificationView:
    """Tell the screen whether a token resolved, with a notice when it did not."""

    return await service.view(session_id, path_token, token)


@router.post("/verify-otp/resend", response_model=Message)
@router.post("/verify-otp/{path_token}/resend", response_model=Message)
async def resend_code(
    path_token: str | None = None,
    token: str | None = None,
    session_id: str = Depends(deps.get_session_id),
    service: VerificationService = Depends(deps.get_verification_service),
) -> Message:
    """Ask the account API to email a fresh registration code."""

    return await service.resend(session_id, path_token, token)


@router.post("/verify-otp", response_model=VerificationView)
@router.post("/verify-otp/{path_token}", response_model=VerificationView)
async def verify_code(
    payload: RegistrationCodeVerify,
    path_token: str | None = None,
    token: str | None = None,
    session_id: str = Depends(deps.get_session_id),
    service: VerificationService = Depends(deps.get_verification_service),
) -> VerificationView:
    """Submit the six-character code for the resolved token."""

    return await service.verify(session_id, payload.code, path_token, token)
