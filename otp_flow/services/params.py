"""Resolve the verify page's email and mode from navigation context."""

from typing import Mapping
from urllib.parse import parse_qs

from otp_flow.schemas.otp import Mode, NavigationState, VerifyParams


def _first(query: Mapping[str, list[str]], key: str) -> str | None:
    values = query.get(key)
    return values[0] if values else None


def resolve_verify_params(state: NavigationState | None, query_string: str = "") -> VerifyParams:
    """Derive `(email, mode)` for a page visit.

    Navigation state from the previous page wins over query parameters. The
    query `mode` only selects signup when it equals "signup" ignoring case;
    anything else, including a missing value, falls back to reset.
    """

    query = parse_qs(query_string.lstrip("?"), keep_blank_values=True)
    state = state or NavigationState()

    email = state.email
    if email is None:
        email = _first(query, "email")
    if email is None:
        email = ""

    mode = state.mode
    if mode is None:
        query_mode = (_first(query, "mode") or "").lower()
        mode = Mode.SIGNUP if query_mode == Mode.SIGNUP.value else Mode.RESET

    return VerifyParams(email=email, mode=mode)
