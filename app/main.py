"""Application entrypoint for the account recovery portal.

This module wires together the FastAPI application with its lifespan hooks,
the shared Redis and httpx clients, error banners, and CORS configuration.
It is the root that other modules depend on when the process starts.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import recovery_router, verify_otp_router
from app.core.config import settings
from app.core.exceptions import add_exception_handlers
from app.core.logging import get_logger
from app.services.api_client import close_http_client
from app.services.session import close_redis_client

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Dispose shared clients on shutdown.

    Both the Redis client (`app.services.session`) and the httpx client
    (`app.services.api_client`) are created lazily on first use, so startup
    has nothing to open.
    """

    logger.info("%s %s starting; account API at %s", settings.PROJECT_NAME, settings.PROJECT_VERSION, settings.API_BASE_URL)
    yield
    await close_http_client()
    await close_redis_client()


def create_application() -> FastAPI:
    """Assemble and configure the FastAPI application instance.

    - Injects the lifespan manager defined above to manage shutdown.
    - Applies CORS settings sourced from environment-driven `settings`; the
      session cookie requires credentials, so origins are listed explicitly.
    - Registers the recovery and verification routers and the banner handlers.
    """

    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_exception_handlers(application)
    application.include_router(recovery_router)
    application.include_router(verify_otp_router)

    @application.get("/")
    async def healthcheck():
        """Lightweight health endpoint used by uptime monitors."""
        return {"message": "Account Recovery Portal is running!"}

    return application


app = create_application()
