"""In-memory registry of live verify-page sessions served over HTTP."""

import secrets
import time
from typing import Callable, Dict, Optional

from otp_flow.core.config import settings
from otp_flow.core.logging import get_logger
from otp_flow.schemas.otp import NavigationState
from otp_flow.services.auth import AuthService
from otp_flow.services.error_channel import ErrorChannel, get_error_channel
from otp_flow.services.flow import VerifyOtpFlow
from otp_flow.services.params import resolve_verify_params

logger = get_logger(__name__)

DEFAULT_CLIENT = "default"


class SessionRegistry:
    """Maps opaque session ids to flows and keeps one error channel per client.

    A client stands in for one browser tab group: every page it opens shares
    the same error channel. Requests without a client id share the
    process-wide channel. Sessions idle for longer than `idle_ttl` seconds
    are closed the next time the registry is used, as are client channels
    nobody listens to any more.
    """

    def __init__(
        self,
        idle_ttl: float = settings.SESSION_IDLE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.idle_ttl = idle_ttl
        self._clock = clock
        self._flows: Dict[str, VerifyOtpFlow] = {}
        self._touched: Dict[str, float] = {}
        self._channels: Dict[str, ErrorChannel] = {}

    def __len__(self) -> int:
        return len(self._flows)

    def channel_for(self, client_id: str = DEFAULT_CLIENT) -> ErrorChannel:
        """Return the channel for a client; the default client uses the process-wide one."""
        if client_id == DEFAULT_CLIENT:
            return get_error_channel()
        channel = self._channels.get(client_id)
        if channel is None:
            channel = self._channels[client_id] = ErrorChannel()
        return channel

    def open(
        self,
        auth_service: AuthService,
        state: Optional[NavigationState] = None,
        query_string: str = "",
        client_id: str = DEFAULT_CLIENT,
    ) -> tuple[str, VerifyOtpFlow]:
        """Enter the verify page and return its new session id and flow."""
        self.purge_expired(keep_client=client_id)
        params = resolve_verify_params(state, query_string)
        flow = VerifyOtpFlow(params, auth_service, self.channel_for(client_id))
        session_id = secrets.token_urlsafe(16)
        self._flows[session_id] = flow
        self._touched[session_id] = self._clock()
        return session_id, flow

    def get(self, session_id: str) -> Optional[VerifyOtpFlow]:
        """Return a live flow and mark it as recently used."""
        self.purge_expired()
        flow = self._flows.get(session_id)
        if flow is None:
            return None
        if flow.terminated:
            self._forget(session_id)
            return None
        self._touched[session_id] = self._clock()
        return flow

    def close(self, session_id: str) -> bool:
        """Leave the page: tear the flow down and forget it."""
        flow = self._forget(session_id)
        if flow is None:
            return False
        flow.close()
        return True

    def close_all(self) -> None:
        """Tear down every live session; used on application shutdown."""
        if self._flows:
            logger.info("Closing %d verify sessions", len(self._flows))
        for session_id in list(self._flows):
            self.close(session_id)
        self._channels.clear()

    def purge_expired(self, keep_client: Optional[str] = None) -> int:
        """Close sessions idle past the TTL and drop unused client channels.

        `keep_client` protects a channel handed out for a page that is about
        to subscribe to it.
        """
        deadline = self._clock() - self.idle_ttl
        expired = [sid for sid, touched in self._touched.items() if touched <= deadline]
        for session_id in expired:
            self.close(session_id)
        if expired:
            logger.info("Expired %d idle verify sessions", len(expired))

        for client_id, channel in list(self._channels.items()):
            if client_id != keep_client and not channel.has_listeners:
                del self._channels[client_id]
        return len(expired)

    def _forget(self, session_id: str) -> Optional[VerifyOtpFlow]:
        self._touched.pop(session_id, None)
        return self._flows.pop(session_id, None)
