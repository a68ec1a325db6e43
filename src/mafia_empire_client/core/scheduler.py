"""Timer scheduling abstraction used by the interaction guards."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock plus one-shot timers."""

    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopScheduler:
    """Schedules timers on an asyncio event loop.

    The loop is resolved on first use, so guards can be built before the
    loop starts running. Using a guard with this scheduler still requires a
    running loop; code without one must pass its own scheduler.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def time(self) -> float:
        return self._resolve_loop().time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._resolve_loop().call_later(max(0.0, delay), callback)

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise RuntimeError(
                    "LoopScheduler needs a running event loop; "
                    "pass a scheduler to use guards outside one"
                ) from exc
        return self._loop


def resolve_scheduler(scheduler: Scheduler | None) -> Scheduler:
    return scheduler or LoopScheduler()


__all__ = [
    "TimerHandle",
    "Scheduler",
    "LoopScheduler",
    "resolve_scheduler",
]
