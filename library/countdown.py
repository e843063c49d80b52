"""Cosmetic countdown shown while an image is being generated.

The countdown is seeded with a rough latency estimate and ticks down once per
interval until it reaches zero, where it stays. It never influences the
request itself. ``start`` returns a cancel handle which the caller must invoke
on every exit path so no periodic task outlives the request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]


class Countdown:
    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self.remaining: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self.remaining is not None

    def start(self, seconds: int, on_tick: Optional[TickCallback] = None) -> Callable[[], None]:
        """Start counting down from ``seconds``; must run inside an event loop.

        Any countdown already running is cancelled first.

        Returns:
            A callable that stops the countdown and resets it to inactive.
        """
        self.cancel()
        self.remaining = max(0, int(seconds))
        self._task = asyncio.get_running_loop().create_task(self._run(on_tick))
        return self.cancel

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.remaining = None

    async def _run(self, on_tick: Optional[TickCallback]) -> None:
        while self.remaining is not None and self.remaining > 0:
            await asyncio.sleep(self.interval)
            if self.remaining is None:
                return
            self.remaining -= 1
            if on_tick is not None:
                try:
                    on_tick(self.remaining)
                except Exception as e:
                    logger.warning(f"[countdown] Tick callback failed: {e}")
