"""Deferred callbacks for the long-press and fine-adjust timers."""

import asyncio
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerScheduler(Protocol):
    """Anything that can run a callback after a delay and hand back a cancellable handle."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioTimerScheduler:
    """TimerScheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay_seconds, callback)
