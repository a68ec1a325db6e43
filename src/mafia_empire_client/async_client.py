"""Public async client entrypoint."""

from __future__ import annotations

from types import TracebackType

from .config import MafiaClientConfig
from .core.async_transport import AsyncTransport
from .core.errors import MafiaClientClosedError, MafiaValidationError
from .core.query_cache import QueryCache
from .core.scheduler import Scheduler
from .game.drugs import DrugLabService, ProductionMonitor
from .game.jail import JailEscapeFlow, JailService
from .ui.button import ThrottleButton
from .ui.input import ThrottledInput


def validate_client_config(config: MafiaClientConfig) -> None:
    try:
        config.validate()
    except ValueError as exc:
        raise MafiaValidationError(str(exc)) from exc


def resolve_query_cache(
    *,
    config: MafiaClientConfig,
    cache: QueryCache | None,
) -> QueryCache | None:
    if cache is not None:
        return cache
    if config.cache.enabled:
        return QueryCache(config.cache.stale_seconds)
    return None


class AsyncMafiaClient:
    """Public async game client.

    Each client owns its transport and its query cache; nothing is shared
    between client instances.
    """

    def __init__(
        self,
        *,
        config: MafiaClientConfig | None = None,
        transport: AsyncTransport | None = None,
        cache: QueryCache | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._config = config or MafiaClientConfig()
        validate_client_config(self._config)

        self._transport = transport or AsyncTransport(self._config)
        self._cache = resolve_query_cache(config=self._config, cache=cache)
        self._scheduler = scheduler
        self._closed = False
        self._jail = JailService(self._transport, cache=self._cache)
        self._drugs = DrugLabService(self._transport, cache=self._cache)

    @property
    def config(self) -> MafiaClientConfig:
        return self._config

    @property
    def cache(self) -> QueryCache | None:
        return self._cache

    @property
    def jail(self) -> JailService:
        self._ensure_open()
        return self._jail

    @property
    def drugs(self) -> DrugLabService:
        self._ensure_open()
        return self._drugs

    def jail_escape_flow(self, **kwargs) -> JailEscapeFlow:
        """Escape/release flow wired with the configured guard windows."""

        guards = self._config.guards
        kwargs.setdefault("escape_cooldown_seconds", guards.escape_cooldown_seconds)
        kwargs.setdefault("action_cooldown_seconds", guards.async_cooldown_seconds)
        kwargs.setdefault("tick_seconds", guards.countdown_tick_seconds)
        kwargs.setdefault("scheduler", self._scheduler)
        return JailEscapeFlow(self.jail, **kwargs)

    def production_monitor(self, lab_id: int, **kwargs) -> ProductionMonitor:
        guards = self._config.guards
        kwargs.setdefault("cooldown_seconds", guards.async_cooldown_seconds)
        kwargs.setdefault("tick_seconds", guards.countdown_tick_seconds)
        kwargs.setdefault("scheduler", self._scheduler)
        return ProductionMonitor(self.drugs, lab_id, **kwargs)

    def throttle_button(self, label: str, on_click=None, **kwargs) -> ThrottleButton:
        kwargs.setdefault("throttle_seconds", self._config.guards.throttle_seconds)
        kwargs.setdefault("scheduler", self._scheduler)
        return ThrottleButton(label, on_click, **kwargs)

    def throttled_input(self, on_change=None, **kwargs) -> ThrottledInput:
        kwargs.setdefault("debounce_seconds", self._config.guards.debounce_seconds)
        kwargs.setdefault("scheduler", self._scheduler)
        return ThrottledInput(on_change, **kwargs)

    def _ensure_open(self) -> None:
        if self._closed:
            raise MafiaClientClosedError("AsyncMafiaClient is already closed")

    async def close(self) -> None:
        if self._closed:
            return
        await self._transport.close()
        if self._cache is not None:
            self._cache.clear()
        self._closed = True

    async def __aenter__(self) -> "AsyncMafiaClient":
        self._ensure_open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "AsyncMafiaClient",
    "validate_client_config",
    "resolve_query_cache",
]
