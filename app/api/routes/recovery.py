"""HTTP route handlers for the three-step password recovery screen."""

import math

from fastapi import APIRouter, Depends, Response

from app.api import deps
from app.schemas.common import Message
from app.schemas.recovery import ForgotPasswordRequest, PasswordResetSubmit, RecoveryView, ResetCodeVerify
from app.services.recovery import RecoveryService

router = APIRouter(prefix="/forgot-password", tags=["password recovery"])


@router.get("", response_model=RecoveryView)
async def open_screen(
    session_id: str = Depends(deps.get_session_id),
    service: RecoveryService = Depends(deps.get_recovery_service),
) -> RecoveryView:
    """Entering (or reloading) the screen drops any unfinished recovery and shows the email step."""

    return await service.enter(session_id)


@router.post("/request", response_model=RecoveryView)
async def request_reset(
    payload: ForgotPasswordRequest,
    session_id: str = Depends(deps.get_session_id),
    service: RecoveryService = Depends(deps.get_recovery_service),
) -> RecoveryView:
    """Send a reset code to the given email and move to the verify step."""

    return await service.request_reset(session_id, payload.email)


@router.post("/verify", response_model=RecoveryView)
async def verify_code(
    payload: ResetCodeVerify,
    session_id: str = Depends(deps.get_session_id),
    service: RecoveryService = Depends(deps.get_recovery_service),
) -> RecoveryView:
    """Check the emailed code for the email carried by the session."""

    return await service.verify_code(session_id, payload.code)


@router.post("/reset", response_model=RecoveryView)
async def reset_password(
    payload: PasswordResetSubmit,
    response: Response,
    session_id: str = Depends(deps.get_session_id),
    service: RecoveryService = Depends(deps.get_recovery_service),
) -> RecoveryView:
    """Set the new password, then point the visitor at sign-in after a short delay."""

    view = await service.reset_password(session_id, payload.new_password, payload.confirm_password)
    if view.redirect_to:
        delay = math.ceil((view.redirect_after_ms or 0) / 1000)
        response.headers["Refresh"] = f"{delay}; url={view.redirect_to}"
    return view


@router.delete("", response_model=Message)
async def restart(
    session_id: str = Depends(deps.get_session_id),
    service: RecoveryService = Depends(deps.get_recovery_service),
) -> Message:
    """Discard the in-progress recovery for this visitor."""

    return await service.restart(session_id)
