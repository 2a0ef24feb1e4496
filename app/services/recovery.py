"""Password recovery orchestration: session state, reentrancy guard and flow transitions."""

from app.schemas.common import Message
from app.schemas.recovery import RecoveryView
from app.services.flow import FlowStep, PasswordRecoveryFlow, RecoveryState, RequestPhase, ResetPhase, VerifyPhase
from app.services.session import SessionStore

FORM_NAME = "forgot-password"


def _view_for(state: RecoveryState, success: str | None = None) -> RecoveryView:
    email = state.email if isinstance(state, (VerifyPhase, ResetPhase)) else None
    return RecoveryView(phase=state.name, email=email, success=success)


class RecoveryService:
    """High-level service used by the recovery routes; holds the session store and the flow."""

    def __init__(self, store: SessionStore, flow: PasswordRecoveryFlow):
        self.store = store
        self.flow = flow

    async def _commit(self, session_id: str, step: FlowStep) -> RecoveryView:
        if step.state is None:
            await self.store.clear_recovery_state(session_id)
            return RecoveryView(
                phase="complete",
                success=step.message,
                redirect_to=step.redirect_to,
                redirect_after_ms=step.redirect_after_ms,
            )
        await self.store.save_recovery_state(session_id, step.state)
        return _view_for(step.state, success=step.message)

    async def enter(self, session_id: str) -> RecoveryView:
        """Opening the screen starts over; only the POST steps carry state forward."""
        await self.store.clear_recovery_state(session_id)
        return RecoveryView(phase=RequestPhase.name)

    async def request_reset(self, session_id: str, email: str) -> RecoveryView:
        async with self.store.submission_guard(session_id, FORM_NAME):
            state = await self.store.load_recovery_state(session_id)
            step = await self.flow.request_reset(state, email)
            return await self._commit(session_id, step)

    async def verify_code(self, session_id: str, code: str) -> RecoveryView:
        async with self.store.submission_guard(session_id, FORM_NAME):
            state = await self.store.load_recovery_state(session_id)
            step = await self.flow.verify_code(state, code)
            return await self._commit(session_id, step)

    async def reset_password(self, session_id: str, new_password: str, confirm_password: str) -> RecoveryView:
        async with self.store.submission_guard(session_id, FORM_NAME):
            state = await self.store.load_recovery_state(session_id)
            step = await self.flow.reset_password(state, new_password, confirm_password)
            return await self._commit(session_id, step)

    async def restart(self, session_id: str) -> Message:
        """Abandon the flow; the next visit starts again at the email step."""
        await self.store.clear_recovery_state(session_id)
        return Message(message="Password recovery restarted.")
