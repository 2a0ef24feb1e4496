from app.api.routes.recovery import router as recovery_router
from app.api.routes.verify_otp import router as verify_otp_router

__all__ = ["recovery_router", "verify_otp_router"]
