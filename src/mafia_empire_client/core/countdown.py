"""Countdown to an absolute expiry timestamp."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from datetime import datetime

from .scheduler import Scheduler, TimerHandle, resolve_scheduler

logger = logging.getLogger("mafia_empire_client")

Expiry = float | datetime


def to_timestamp(value: Expiry | None) -> float | None:
    """Normalize an expiry to epoch seconds. Naive datetimes are local time."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.timestamp()
    return float(value)


def format_countdown(seconds: int) -> str:
    """``MM:SS``, or ``HH:MM:SS`` once more than an hour remains."""

    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if seconds > 3600:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours * 60 + minutes:02d}:{secs:02d}"


def format_sentence(seconds: int) -> str:
    """Jail style remaining time, e.g. ``1h 4m 9s``; ``Released`` at zero."""

    seconds = int(seconds)
    if seconds <= 0:
        return "Released"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    prefix = f"{hours}h " if hours > 0 else ""
    return f"{prefix}{minutes}m {secs}s"


class CountdownTimer:
    """Live countdown that notifies ``on_expire`` exactly once per target.

    Remaining time is always ``max(0, expires_at - now)``. Ticks run every
    ``tick_seconds`` and the last tick is shortened so expiry is reported as
    soon as the target passes, never before it. ``restart()`` re-arms the
    expiry notification.
    """

    def __init__(
        self,
        expires_at: Expiry | None,
        *,
        on_expire: Callable[[], None] | None = None,
        on_tick: Callable[[int], None] | None = None,
        tick_seconds: float = 1.0,
        auto_start: bool = True,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be > 0")
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._tick_seconds = float(tick_seconds)
        self._scheduler = resolve_scheduler(scheduler)
        self._clock = clock or time.time

        self._expires_at = to_timestamp(expires_at)
        self._duration_seconds = self.remaining_seconds
        self._running = False
        self._expiry_notified = False
        self._handle: TimerHandle | None = None
        self._closed = False
        if auto_start:
            self.start()

    @property
    def expires_at(self) -> float | None:
        return self._expires_at

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def has_expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at

    @property
    def remaining_seconds(self) -> int:
        return math.floor(self._remaining_exact())

    @property
    def days(self) -> int:
        return self.remaining_seconds // 86400

    @property
    def hours(self) -> int:
        return (self.remaining_seconds % 86400) // 3600

    @property
    def minutes(self) -> int:
        return (self.remaining_seconds % 3600) // 60

    @property
    def seconds(self) -> int:
        return self.remaining_seconds % 60

    @property
    def formatted(self) -> str:
        return format_countdown(self.remaining_seconds)

    @property
    def percentage_remaining(self) -> int:
        if self._duration_seconds <= 0:
            return 0
        return min(100, math.floor(self.remaining_seconds / self._duration_seconds * 100))

    def start(self) -> None:
        if self._closed or self._running or self._expires_at is None:
            return
        self._running = True
        self._schedule_next()

    def pause(self) -> None:
        self._running = False
        self._cancel_timer()

    def resume(self) -> None:
        self.start()

    def restart(self, expires_at: Expiry) -> None:
        self._cancel_timer()
        self._running = False
        self._expires_at = to_timestamp(expires_at)
        self._duration_seconds = self.remaining_seconds
        self._expiry_notified = False
        self.start()

    def close(self) -> None:
        self._closed = True
        self._running = False
        self._cancel_timer()

    def _remaining_exact(self) -> float:
        if self._expires_at is None:
            return 0.0
        return max(0.0, self._expires_at - self._clock())

    def _schedule_next(self) -> None:
        delay = min(self._tick_seconds, self._remaining_exact())
        self._handle = self._scheduler.call_later(delay, self._tick)

    def _tick(self) -> None:
        self._handle = None
        if not self._running:
            return
        if self._on_tick is not None:
            self._on_tick(self.remaining_seconds)
        if self._remaining_exact() > 0:
            self._schedule_next()
            return

        self._running = False
        if self._expiry_notified:
            return
        self._expiry_notified = True
        logger.debug("countdown expired expires_at=%s", self._expires_at)
        if self._on_expire is not None:
            self._on_expire()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


__all__ = [
    "Expiry",
    "to_timestamp",
    "format_countdown",
    "format_sentence",
    "CountdownTimer",
]
