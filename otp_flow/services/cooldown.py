"""Resend cooldown countdown driven by the running asyncio loop."""

import asyncio
from typing import Awaitable, Callable, Optional

from otp_flow.core.config import settings
from otp_flow.core.logging import get_logger

logger = get_logger(__name__)

TickListener = Callable[[int], None]


class CooldownTimer:
    """Counts `remaining` down by one per interval until it reaches zero.

    Starting at `n` schedules exactly `n` decrements and then stops. Calling
    `start` again replaces the running countdown; `cancel` stops delivering
    ticks and leaves `remaining` where it was.
    """

    def __init__(
        self,
        interval: float = settings.COOLDOWN_TICK_SECONDS,
        on_tick: Optional[TickListener] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.interval = interval
        self.on_tick = on_tick
        self._sleep = sleep
        self._remaining = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, seconds: int) -> None:
        """(Re)start the countdown at `seconds`; requires a running event loop."""
        self.cancel()
        self._remaining = max(0, seconds)
        if self._remaining == 0:
            return
        logger.debug("Cooldown started at %ss", self._remaining)
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            logger.debug("Cooldown cancelled with %ss remaining", self._remaining)
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait until the current countdown finishes or is cancelled."""
        task = self._task
        if task is None or task.done():
            return
        await asyncio.wait({task})

    async def _run(self) -> None:
        while self._remaining > 0:
            await self._sleep(self.interval)
            self._remaining -= 1
            if self.on_tick is not None:
                self.on_tick(self._remaining)
