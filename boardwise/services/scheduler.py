"""
Animation step schedulers.
A scheduler runs one callback after a delay and returns a handle with cancel().
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable


class AsyncioScheduler:
    """Schedules on an asyncio event loop (the running loop unless one is given)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)


@dataclass
class ManualHandle:
    due_ms: int
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """
    Deterministic scheduler driven by advance()/run_all().
    Used by the command-line player and in tests; no real time passes.
    """
    now_ms: int = 0
    handles: list[ManualHandle] = field(default_factory=list)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(due_ms=self.now_ms + delay_ms, callback=callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, delay_ms: int) -> int:
        """Move time forward, firing due callbacks in order. Returns how many fired."""
        target = self.now_ms + delay_ms
        fired = 0
        while True:
            due = [h for h in self.pending if h.due_ms <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.due_ms)
            self.now_ms = handle.due_ms
            handle.fired = True
            handle.callback()
            fired += 1
        self.now_ms = target
        return fired

    def run_all(self, limit: int = 1000) -> int:
        """Fire pending callbacks until none remain (bounded by limit)."""
        fired = 0
        while self.pending and fired < limit:
            handle = min(self.pending, key=lambda h: h.due_ms)
            self.now_ms = max(self.now_ms, handle.due_ms)
            handle.fired = True
            handle.callback()
            fired += 1
        return fired
