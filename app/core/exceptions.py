"""Error taxonomy for the recovery and verification flows.

Every failure a visitor can see is a `FlowError`. Because it subclasses
FastAPI's `HTTPException`, services raise it directly (the same way the auth
services raise `HTTPException`) and `add_exception_handlers` turns it into an
error banner. All of these errors are recoverable: the visitor retries the
same step.
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from app.core.logging import get_logger

logger = get_logger(__name__)

SESSION_STORE_UNAVAILABLE = "The service is temporarily unavailable. Please try again."


class FlowError(HTTPException):
    """Base error carrying the banner text and the phase it was raised in."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, phase: str | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.phase = phase

    @property
    def message(self) -> str:
        return str(self.detail)


class UpstreamError(FlowError):
    """The remote account API rejected the call or could not be reached.

    `message` may be empty when the collaborator gave nothing readable; callers
    swap in their own fallback via `with_fallback`.
    """

    def __init__(self, message: str, upstream_status: int | None = None, body=None, phase: str | None = None):
        if upstream_status is None or upstream_status >= 500:
            code = status.HTTP_502_BAD_GATEWAY
        else:
            code = status.HTTP_400_BAD_REQUEST
        super().__init__(message, status_code=code, phase=phase)
        self.upstream_status = upstream_status
        self.body = body

    def with_fallback(self, fallback: str, phase: str | None = None) -> "UpstreamError":
        """Return a copy whose message is `fallback` when none was extracted."""
        return UpstreamError(
            self.message or fallback,
            upstream_status=self.upstream_status,
            body=self.body,
            phase=phase or self.phase,
        )


class PreconditionError(FlowError):
    """A local check failed before contacting the collaborator."""


class PhaseError(FlowError):
    """The requested step does not belong to the session's current phase."""

    def __init__(self, message: str, phase: str | None = None):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, phase=phase)


class SubmissionInProgressError(FlowError):
    """A previous submission of the same form has not settled yet."""

    def __init__(self, phase: str | None = None):
        super().__init__(
            "A submission is already in progress. Please wait.",
            status_code=status.HTTP_409_CONFLICT,
            phase=phase,
        )


def add_exception_handlers(app: FastAPI) -> None:
    """Render every `FlowError`, and session storage outages, as an error banner; success is always null."""

    @app.exception_handler(FlowError)
    async def flow_error_handler(request: Request, exc: FlowError) -> JSONResponse:
        logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, type(exc).__name__)
        return JSONResponse(
            status_code=exc.status_code,
            content={"phase": exc.phase, "success": None, "error": exc.message},
        )

    @app.exception_handler(RedisError)
    async def session_store_error_handler(request: Request, exc: RedisError) -> JSONResponse:
        logger.error("%s %s -> session store unavailable (%s)", request.method, request.url.path, type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"phase": None, "success": None, "error": SESSION_STORE_UNAVAILABLE},
        )
