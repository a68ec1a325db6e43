"""Trailing-edge debounce for synchronous actions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .scheduler import Scheduler, TimerHandle, resolve_scheduler

logger = logging.getLogger("mafia_empire_client")

_Call = tuple[tuple[Any, ...], dict[str, Any]]


class Debouncer:
    """Delays an action until calls stop arriving for ``delay_seconds``.

    Only the most recent call of a burst survives. With ``leading=True`` the
    first call of a burst runs at once and the rest of the burst is debounced
    normally. ``max_wait_seconds`` caps how long a continuous burst may
    postpone execution.
    """

    def __init__(
        self,
        action: Callable[..., Any],
        delay_seconds: float = 0.5,
        *,
        leading: bool = False,
        max_wait_seconds: float | None = None,
        scheduler: Scheduler | None = None,
        on_state_change: Callable[[bool], None] | None = None,
    ) -> None:
        if max_wait_seconds is not None and max_wait_seconds < 0:
            raise ValueError("max_wait_seconds must be >= 0")
        self._action = action
        self._delay_seconds = max(0.0, float(delay_seconds))
        self._leading = leading
        self._max_wait_seconds = max_wait_seconds
        self._scheduler = resolve_scheduler(scheduler)
        self._on_state_change = on_state_change
        self._pending: _Call | None = None
        self._quiet_handle: TimerHandle | None = None
        self._max_handle: TimerHandle | None = None
        self._closed = False

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        if self._closed:
            logger.debug("debounce call dropped; closed")
            return

        if self._leading and self._quiet_handle is None:
            self._restart_quiet_timer()
            self._action(*args, **kwargs)
            return

        was_pending = self.is_pending
        self._pending = (args, kwargs)
        self._restart_quiet_timer()
        if self._max_wait_seconds is not None and self._max_handle is None:
            self._max_handle = self._scheduler.call_later(self._max_wait_seconds, self._fire)
        if not was_pending:
            self._notify(True)

    def cancel(self) -> None:
        """Discard the pending call without running it."""

        was_pending = self.is_pending
        self._pending = None
        self._cancel_timers()
        if was_pending:
            logger.debug("debounce pending call cancelled")
            self._notify(False)

    def flush(self) -> None:
        """Run the pending call now instead of waiting for the quiet period."""

        if self.is_pending:
            self._fire()

    def close(self) -> None:
        self._closed = True
        self._pending = None
        self._cancel_timers()

    def _restart_quiet_timer(self) -> None:
        if self._quiet_handle is not None:
            self._quiet_handle.cancel()
        self._quiet_handle = self._scheduler.call_later(self._delay_seconds, self._fire)

    def _fire(self) -> None:
        pending = self._pending
        self._pending = None
        self._cancel_timers()
        if pending is None:
            return
        self._notify(False)
        args, kwargs = pending
        self._action(*args, **kwargs)

    def _cancel_timers(self) -> None:
        for handle in (self._quiet_handle, self._max_handle):
            if handle is not None:
                handle.cancel()
        self._quiet_handle = None
        self._max_handle = None

    def _notify(self, pending: bool) -> None:
        if self._on_state_change is not None and not self._closed:
            self._on_state_change(pending)


__all__ = [
    "Debouncer",
]
