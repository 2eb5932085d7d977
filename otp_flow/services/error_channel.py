"""Process-wide slot carrying the latest auth-service error between pages."""

from typing import Callable, List, Optional

from otp_flow.core.logging import get_logger

logger = get_logger(__name__)

ErrorListener = Callable[[Optional[str]], None]


class ErrorChannel:
    """Holds the most recent server error and notifies subscribed pages.

    Only the latest message is retained; publishing replaces it. `clear`
    notifies listeners with `None` so they can drop stale banners.
    """

    def __init__(self) -> None:
        self._current: Optional[str] = None
        self._listeners: List[ErrorListener] = []

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    @property
    def current(self) -> Optional[str]:
        return self._current

    def publish(self, message: str) -> None:
        self._current = message
        self._notify(message)

    def clear(self) -> None:
        if self._current is None:
            return
        self._current = None
        self._notify(None)

    def subscribe(self, listener: ErrorListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, message: Optional[str]) -> None:
        for listener in list(self._listeners):
            listener(message)


_default_channel: Optional[ErrorChannel] = None


def get_error_channel() -> ErrorChannel:
    """Return the lazily created channel shared across the process."""
    global _default_channel
    if _default_channel is None:
        _default_channel = ErrorChannel()
    return _default_channel


def reset_error_channel() -> None:
    """Drop the shared channel; invoked on application shutdown and in tests."""
    global _default_channel
    if _default_channel is not None:
        logger.debug("Resetting shared error channel")
    _default_channel = None
