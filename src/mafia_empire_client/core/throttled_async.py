"""Single-flight guard for asynchronous actions with a post-settle cooldown."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Generic, TypeVar

from .scheduler import Scheduler, TimerHandle, resolve_scheduler

T = TypeVar("T")

logger = logging.getLogger("mafia_empire_client")


class AsyncStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ThrottledAsync(Generic[T]):
    """Wraps an async action so only one call is in flight at a time.

    ``execute()`` is dropped while a call is loading and during the cooldown
    that follows every settle, success or error alike. Failures are stored on
    ``error`` and reflected in ``status``; they never propagate out of
    ``execute()``.

    State machine::

        idle --execute--> loading --resolve--> success --cooldown--> idle
                                  --reject---> error   --cooldown--> idle
    """

    def __init__(
        self,
        action: Callable[..., Awaitable[T]],
        *,
        cooldown_seconds: float = 0.2,
        scheduler: Scheduler | None = None,
        on_status_change: Callable[[AsyncStatus], None] | None = None,
        name: str | None = None,
    ) -> None:
        self._action = action
        self._cooldown_seconds = max(0.0, float(cooldown_seconds))
        self._scheduler = resolve_scheduler(scheduler)
        self._on_status_change = on_status_change
        self._name = name or getattr(action, "__name__", "action")

        self._status = AsyncStatus.IDLE
        self._error: Exception | None = None
        self._result: T | None = None
        self._task: asyncio.Future[T] | None = None
        self._cooldown_until: float | None = None
        self._cooldown_handle: TimerHandle | None = None
        self._closed = False

    @property
    def status(self) -> AsyncStatus:
        return self._status

    @property
    def is_loading(self) -> bool:
        return self._status is AsyncStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self._status is AsyncStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self._status is AsyncStatus.ERROR

    @property
    def is_cooling_down(self) -> bool:
        if self._cooldown_until is None:
            return False
        return self._scheduler.time() < self._cooldown_until

    @property
    def error(self) -> Exception | None:
        return self._error

    @property
    def result(self) -> T | None:
        return self._result

    async def execute(self, *args: Any, **kwargs: Any) -> T | None:
        if self._closed:
            logger.debug("execute dropped; closed action=%s", self._name)
            return None
        if self.is_loading:
            logger.debug("execute dropped; in flight action=%s", self._name)
            return None
        if self.is_cooling_down:
            logger.debug("execute dropped; cooling down action=%s", self._name)
            return None

        self._cancel_cooldown()
        self._error = None
        self._set_status(AsyncStatus.LOADING)
        task = asyncio.ensure_future(self._invoke(args, kwargs))
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if self._task is not task:
                # aborted
                return None
            self._task = None
            self._set_status(AsyncStatus.IDLE)
            raise
        except Exception as exc:
            if self._task is not task:
                return None
            self._task = None
            self._error = exc
            logger.warning(
                "action failed action=%s error=%s",
                self._name,
                exc.__class__.__name__,
            )
            self._settle(AsyncStatus.ERROR)
            return None

        if self._task is not task:
            return None
        self._task = None
        self._result = result
        logger.debug("action succeeded action=%s", self._name)
        self._settle(AsyncStatus.SUCCESS)
        return result

    async def _invoke(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> T:
        return await self._action(*args, **kwargs)

    def abort(self) -> bool:
        """Cancel the in-flight call. No cooldown follows an abort."""

        task = self._task
        if task is None:
            return False
        self._task = None
        task.cancel()
        logger.debug("action aborted action=%s", self._name)
        self._set_status(AsyncStatus.IDLE)
        return True

    def reset(self) -> None:
        """Forget the last outcome and end any cooldown early."""

        if self.is_loading:
            return
        self._cancel_cooldown()
        self._error = None
        self._result = None
        self._set_status(AsyncStatus.IDLE)

    def close(self) -> None:
        self._closed = True
        task = self._task
        self._task = None
        if task is not None:
            task.cancel()
        self._cancel_cooldown()
        self._status = AsyncStatus.IDLE

    def _settle(self, status: AsyncStatus) -> None:
        self._set_status(status)
        self._cooldown_until = self._scheduler.time() + self._cooldown_seconds
        self._cooldown_handle = self._scheduler.call_later(
            self._cooldown_seconds,
            self._on_cooldown_elapsed,
        )

    def _on_cooldown_elapsed(self) -> None:
        self._cooldown_handle = None
        self._cooldown_until = None
        if self._status in (AsyncStatus.SUCCESS, AsyncStatus.ERROR):
            self._set_status(AsyncStatus.IDLE)

    def _cancel_cooldown(self) -> None:
        if self._cooldown_handle is not None:
            self._cooldown_handle.cancel()
            self._cooldown_handle = None
        self._cooldown_until = None

    def _set_status(self, status: AsyncStatus) -> None:
        if status is self._status:
            return
        self._status = status
        if self._on_status_change is not None and not self._closed:
            self._on_status_change(status)


__all__ = [
    "AsyncStatus",
    "ThrottledAsync",
]
