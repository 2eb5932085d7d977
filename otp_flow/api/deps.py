"""Dependency providers used by FastAPI endpoints.

These helpers expose the shared HTTP client, the session registry, and
per-client auth services through FastAPI's dependency injection system so
route handlers remain thin.
"""

import httpx
from fastapi import Depends, Header, HTTPException, Request, status

from otp_flow.services.auth import AuthService
from otp_flow.services.flow import VerifyOtpFlow
from otp_flow.services.sessions import DEFAULT_CLIENT, SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    """Return the registry created by the application lifespan."""
    return request.app.state.sessions


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Return the shared client pointed at the authentication API."""
    return request.app.state.http_client


def get_client_id(x_client_id: str | None = Header(default=None)) -> str:
    """Identify the browser client whose pages share one error channel."""
    return x_client_id or DEFAULT_CLIENT


def get_auth_service(
    client: httpx.AsyncClient = Depends(get_http_client),
    registry: SessionRegistry = Depends(get_registry),
    client_id: str = Depends(get_client_id),
) -> AuthService:
    """Assemble AuthService publishing failures on the caller's error channel."""
    return AuthService(client, registry.channel_for(client_id))


def get_flow(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> VerifyOtpFlow:
    """Look up a live verify session or fail with 404."""
    flow = registry.get(session_id)
    if flow is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Verification session not found.")
    return flow
