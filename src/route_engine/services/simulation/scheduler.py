"""Cancellable "call me later" primitives the simulation clock can run on."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import Callable, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> Handle: ...


@dataclass(slots=True)
class ManualHandle:
    callback: Callable[[], None]
    delay_ms: float
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Queue callbacks until ``run_pending`` is called.

    Useful for tests and for hosts that already own a frame loop.
    """

    def __init__(self) -> None:
        self._queue: list[ManualHandle] = []

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(callback=callback, delay_ms=delay_ms)
        self._queue.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [handle for handle in self._queue if not handle.cancelled]

    def run_pending(self) -> int:
        """Fire every queued, uncancelled callback once; return how many ran."""

        queue, self._queue = self._queue, []
        fired = 0
        for handle in queue:
            if handle.cancelled:
                continue
            handle.callback()
            fired += 1
        return fired


class ThreadingScheduler:
    """Run callbacks on ``threading.Timer`` threads."""

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0.0, delay_ms) / 1000, callback)
        timer.daemon = True
        timer.start()
        return timer


class AsyncioScheduler:
    """Run callbacks on an asyncio event loop. Must be used from the loop's thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_ms) / 1000, callback)
