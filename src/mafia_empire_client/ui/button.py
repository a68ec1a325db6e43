"""Button bindings that surface guard state for a renderer."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from ..core.scheduler import Scheduler
from ..core.throttle import Throttle
from ..core.throttled_async import AsyncStatus, ThrottledAsync

T = TypeVar("T")


class ThrottleButton:
    """Button whose click handler is throttled.

    While the cooldown runs the button reports itself disabled and, when
    ``show_loading`` is on, asks for a spinner next to ``busy_label``.
    """

    def __init__(
        self,
        label: str,
        on_click: Callable[..., Any] | None = None,
        *,
        throttle_seconds: float = 0.5,
        show_loading: bool = True,
        busy_label: str | None = None,
        disabled: bool = False,
        scheduler: Scheduler | None = None,
        on_state_change: Callable[[bool], None] | None = None,
    ) -> None:
        self.label = label
        self.busy_label = busy_label
        self.show_loading = show_loading
        self.disabled = disabled
        self._throttle = Throttle(
            on_click or _noop,
            throttle_seconds,
            scheduler=scheduler,
            on_state_change=on_state_change,
        )

    @property
    def is_busy(self) -> bool:
        return self._throttle.is_throttled

    @property
    def is_disabled(self) -> bool:
        return self.disabled or self.is_busy

    @property
    def show_spinner(self) -> bool:
        return self.show_loading and self.is_busy

    @property
    def display_label(self) -> str:
        if self.show_spinner and self.busy_label:
            return self.busy_label
        return self.label

    def click(self, *args: Any, **kwargs: Any) -> bool:
        if self.disabled:
            return False
        return self._throttle(*args, **kwargs)

    def close(self) -> None:
        self._throttle.close()


class AsyncActionButton(Generic[T]):
    """Button bound to an async action through :class:`ThrottledAsync`."""

    def __init__(
        self,
        label: str,
        action: Callable[..., Awaitable[T]],
        *,
        cooldown_seconds: float = 0.2,
        loading_label: str | None = None,
        disabled: bool = False,
        scheduler: Scheduler | None = None,
        on_status_change: Callable[[AsyncStatus], None] | None = None,
    ) -> None:
        self.label = label
        self.loading_label = loading_label
        self.disabled = disabled
        self._guard: ThrottledAsync[T] = ThrottledAsync(
            action,
            cooldown_seconds=cooldown_seconds,
            scheduler=scheduler,
            on_status_change=on_status_change,
            name=label,
        )

    @property
    def guard(self) -> ThrottledAsync[T]:
        return self._guard

    @property
    def status(self) -> AsyncStatus:
        return self._guard.status

    @property
    def error(self) -> Exception | None:
        return self._guard.error

    @property
    def show_spinner(self) -> bool:
        return self._guard.is_loading

    @property
    def is_disabled(self) -> bool:
        return self.disabled or self._guard.is_loading or self._guard.is_cooling_down

    @property
    def display_label(self) -> str:
        if self._guard.is_loading and self.loading_label:
            return self.loading_label
        return self.label

    async def press(self, *args: Any, **kwargs: Any) -> T | None:
        if self.disabled:
            return None
        return await self._guard.execute(*args, **kwargs)

    def close(self) -> None:
        self._guard.close()


def _noop(*args: Any, **kwargs: Any) -> None:
    return None


__all__ = [
    "ThrottleButton",
    "AsyncActionButton",
]
