"""HTTP route handlers for the verify-OTP page session."""

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from otp_flow.api import deps
from otp_flow.schemas.auth import Message
from otp_flow.schemas.otp import ActionResponse, FieldsUpdate, NavigationState, SessionSnapshot
from otp_flow.services.auth import AuthService
from otp_flow.services.flow import ActionOutcome, VerifyOtpFlow
from otp_flow.services.sessions import SessionRegistry

router = APIRouter(prefix="/verify-otp", tags=["verify-otp"])


def _reject_if_busy(flow: VerifyOtpFlow) -> None:
    if flow.is_submitting:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A request is already in progress.")


def _action_response(
    outcome: ActionOutcome, session_id: str, flow: VerifyOtpFlow, registry: SessionRegistry
) -> ActionResponse:
    snapshot = flow.snapshot(session_id)
    if flow.terminated:
        registry.close(session_id)
    return ActionResponse(
        accepted=outcome is not ActionOutcome.IGNORED,
        session=snapshot,
        navigation=flow.navigation,
    )


@router.post("", response_model=SessionSnapshot, status_code=status.HTTP_201_CREATED)
async def enter_page(
    request: Request,
    state: NavigationState | None = Body(default=None),
    registry: SessionRegistry = Depends(deps.get_registry),
    auth_service: AuthService = Depends(deps.get_auth_service),
    client_id: str = Depends(deps.get_client_id),
) -> SessionSnapshot:
    """Open a verify session from navigation state and the `email`/`mode` query."""

    session_id, flow = registry.open(auth_service, state, request.url.query, client_id)
    return flow.snapshot(session_id)


@router.get("/{session_id}", response_model=SessionSnapshot)
async def read_page(session_id: str, flow: VerifyOtpFlow = Depends(deps.get_flow)) -> SessionSnapshot:
    """Return the current field values, errors, and cooldown."""

    return flow.snapshot(session_id)


@router.patch("/{session_id}", response_model=SessionSnapshot)
async def edit_fields(
    session_id: str,
    payload: FieldsUpdate,
    flow: VerifyOtpFlow = Depends(deps.get_flow),
) -> SessionSnapshot:
    """Apply user edits to the form fields."""

    flow.update(payload)
    return flow.snapshot(session_id)


@router.post("/{session_id}/submit", response_model=ActionResponse)
async def submit(
    session_id: str,
    flow: VerifyOtpFlow = Depends(deps.get_flow),
    registry: SessionRegistry = Depends(deps.get_registry),
) -> ActionResponse:
    """Validate and submit the code; returns the login navigation on success."""

    _reject_if_busy(flow)
    outcome = await flow.submit()
    return _action_response(outcome, session_id, flow, registry)


@router.post("/{session_id}/resend", response_model=ActionResponse)
async def resend(
    session_id: str,
    flow: VerifyOtpFlow = Depends(deps.get_flow),
    registry: SessionRegistry = Depends(deps.get_registry),
) -> ActionResponse:
    """Request a new code; ignored while the cooldown is running."""

    _reject_if_busy(flow)
    outcome = await flow.resend()
    return _action_response(outcome, session_id, flow, registry)


@router.delete("/{session_id}", response_model=Message)
async def leave_page(session_id: str, registry: SessionRegistry = Depends(deps.get_registry)) -> Message:
    """Leave the page: stop the cooldown and clear the shared error."""

    if not registry.close(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Verification session not found.")
    return Message(message="Verification session closed.")
