"""Text input binding with a debounced change handler."""

from __future__ import annotations

from collections.abc import Callable

from ..core.debounce import Debouncer
from ..core.scheduler import Scheduler


class ThrottledInput:
    """Keeps the typed value locally and reports it once typing pauses."""

    def __init__(
        self,
        on_change: Callable[[str], None] | None = None,
        *,
        debounce_seconds: float = 0.3,
        value: str = "",
        label: str | None = None,
        show_loading: bool = False,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.label = label
        self.show_loading = show_loading
        self._value = value
        self._on_change = on_change
        self._debouncer = Debouncer(
            self._emit,
            debounce_seconds,
            scheduler=scheduler,
        )

    @property
    def value(self) -> str:
        return self._value

    @property
    def is_pending(self) -> bool:
        return self._debouncer.is_pending

    @property
    def show_spinner(self) -> bool:
        return self.show_loading and self.is_pending

    def type(self, text: str) -> None:
        self._value = text
        self._debouncer(text)

    def sync(self, value: str) -> None:
        """Adopt a value set by the owner; does not fire ``on_change``."""

        if value != self._value:
            self._value = value

    def close(self) -> None:
        self._debouncer.close()

    def _emit(self, text: str) -> None:
        if self._on_change is not None:
            self._on_change(text)


__all__ = [
    "ThrottledInput",
]
