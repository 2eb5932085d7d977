"""Application entrypoint for the verify-OTP front-end service.

This module wires the FastAPI application with its lifespan hooks, the shared
HTTP client for the authentication API, the in-memory session registry, and
CORS configuration.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from otp_flow.api.routes import verify_otp_router
from otp_flow.core.config import settings
from otp_flow.core.logging import setup_logging
from otp_flow.services.auth import create_http_client
from otp_flow.services.error_channel import reset_error_channel
from otp_flow.services.sessions import SessionRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open shared clients on startup and tear down live sessions on shutdown.

    Every open verify session is closed before the HTTP client goes away so
    no cooldown task outlives the event loop.
    """

    app.state.http_client = create_http_client()
    app.state.sessions = SessionRegistry()
    yield
    app.state.sessions.close_all()
    reset_error_channel()
    await app.state.http_client.aclose()


def create_application() -> FastAPI:
    """Assemble and configure the FastAPI application instance."""

    setup_logging()
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

    application.include_router(verify_otp_router)

    @application.get("/")
    async def healthcheck():
        """Lightweight health endpoint used by uptime monitors."""
        return {"message": f"{settings.PROJECT_NAME} is running!"}

    return application


app = create_application()
