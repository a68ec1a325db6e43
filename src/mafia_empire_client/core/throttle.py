"""Leading-edge throttle for synchronous actions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .scheduler import Scheduler, TimerHandle, resolve_scheduler

logger = logging.getLogger("mafia_empire_client")


class Throttle:
    """Runs an action at most once per cooldown window.

    Calls made inside the window are dropped, never queued. The window opens
    before the action runs, so an action that raises still blocks repeats;
    its exception reaches the caller untouched. Without an explicit
    ``scheduler`` the guard must be called from a running event loop.
    """

    def __init__(
        self,
        action: Callable[..., Any],
        cooldown_seconds: float = 0.3,
        *,
        scheduler: Scheduler | None = None,
        on_state_change: Callable[[bool], None] | None = None,
    ) -> None:
        self._action = action
        self._cooldown_seconds = max(0.0, float(cooldown_seconds))
        self._scheduler = resolve_scheduler(scheduler)
        self._on_state_change = on_state_change
        self._last_fired_at: float | None = None
        self._handle: TimerHandle | None = None
        self._closed = False

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown_seconds

    @property
    def is_throttled(self) -> bool:
        return self.remaining_seconds > 0

    @property
    def remaining_seconds(self) -> float:
        if self._last_fired_at is None:
            return 0.0
        remaining = self._last_fired_at + self._cooldown_seconds - self._scheduler.time()
        return max(0.0, remaining)

    def __call__(self, *args: Any, **kwargs: Any) -> bool:
        if self._closed:
            logger.debug("throttle call dropped; closed")
            return False
        if self.is_throttled:
            logger.debug(
                "throttle call dropped remaining=%.3f",
                self.remaining_seconds,
            )
            return False

        self._last_fired_at = self._scheduler.time()
        self._cancel_timer()
        if self._cooldown_seconds > 0:
            self._handle = self._scheduler.call_later(self._cooldown_seconds, self._on_cooldown_elapsed)
            self._notify(True)
        self._action(*args, **kwargs)
        return True

    def reset(self) -> None:
        was_throttled = self.is_throttled
        self._cancel_timer()
        self._last_fired_at = None
        if was_throttled:
            self._notify(False)

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()
        self._last_fired_at = None

    def _on_cooldown_elapsed(self) -> None:
        self._handle = None
        self._notify(False)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _notify(self, throttled: bool) -> None:
        if self._on_state_change is not None and not self._closed:
            self._on_state_change(throttled)


__all__ = [
    "Throttle",
]
