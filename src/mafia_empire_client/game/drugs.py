"""Drug lab endpoints and production tracking."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from ..core.async_transport import AsyncTransport, request_json_list, request_json_object
from ..core.background import BackgroundTasks
from ..core.countdown import CountdownTimer
from ..core.errors import MafiaValidationError
from ..core.query_cache import QueryCache, QueryKey
from ..core.scheduler import Scheduler, TimerHandle, resolve_scheduler
from ..core.throttled_async import ThrottledAsync
from .models import CollectResult, DrugLab, MessageResult, Production, StartProductionResult
from .parser import (
    parse_collect_result,
    parse_drug_lab,
    parse_message_result,
    parse_production,
    parse_start_production,
)

DRUG_LABS_KEY: QueryKey = ("/api/user/drug-labs",)
USER_DRUGS_KEY: QueryKey = ("/api/user/drugs",)

logger = logging.getLogger("mafia_empire_client")


def production_key(lab_id: int) -> QueryKey:
    return (*DRUG_LABS_KEY, lab_id, "production")


def _validate_id(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise MafiaValidationError(f"{name} must be a positive integer")
    return value


class DrugLabService:
    """Async wrapper over the drug lab REST endpoints."""

    def __init__(self, transport: AsyncTransport, *, cache: QueryCache | None = None) -> None:
        self._transport = transport
        self._cache = cache

    async def labs(self, *, refresh: bool = False) -> tuple[DrugLab, ...]:
        items = await self._cached_list(DRUG_LABS_KEY, "/api/user/drug-labs", refresh=refresh)
        return tuple(parse_drug_lab(item) for item in items)

    async def create_lab(self, name: str, *, cost_to_upgrade: int = 0) -> MessageResult:
        if not name or not name.strip():
            raise MafiaValidationError("lab name must not be empty")
        payload = await request_json_object(
            self._transport,
            "POST",
            "/api/user/drug-labs",
            json={"name": name.strip(), "costToUpgrade": cost_to_upgrade},
        )
        self._invalidate(DRUG_LABS_KEY)
        return parse_message_result(payload)

    async def upgrade_lab(self, lab_id: int) -> MessageResult:
        _validate_id("lab_id", lab_id)
        payload = await request_json_object(
            self._transport,
            "PATCH",
            f"/api/user/drug-labs/{lab_id}/upgrade",
        )
        self._invalidate(DRUG_LABS_KEY)
        return parse_message_result(payload)

    async def productions(self, lab_id: int, *, refresh: bool = False) -> tuple[Production, ...]:
        _validate_id("lab_id", lab_id)
        items = await self._cached_list(
            production_key(lab_id),
            f"/api/user/drug-labs/{lab_id}/production",
            refresh=refresh,
        )
        return tuple(parse_production(item) for item in items)

    async def start_production(
        self,
        lab_id: int,
        drug_id: int,
        quantity: int = 1,
    ) -> StartProductionResult:
        _validate_id("lab_id", lab_id)
        _validate_id("drug_id", drug_id)
        _validate_id("quantity", quantity)
        payload = await request_json_object(
            self._transport,
            "POST",
            f"/api/user/drug-labs/{lab_id}/production",
            json={"drugId": drug_id, "quantity": quantity},
        )
        self._invalidate(production_key(lab_id))
        return parse_start_production(payload)

    async def collect_production(self) -> CollectResult:
        """Collect every finished production across the player's labs."""

        payload = await request_json_object(
            self._transport,
            "POST",
            "/api/user/drug-labs/collect-production",
        )
        # production lists of every lab are affected
        self._invalidate(DRUG_LABS_KEY)
        self._invalidate(USER_DRUGS_KEY)
        return parse_collect_result(payload)

    async def _cached_list(
        self,
        key: QueryKey,
        path: str,
        *,
        refresh: bool,
    ) -> list[dict[str, object]]:
        if not refresh and self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
        items = await request_json_list(self._transport, "GET", path)
        if self._cache is not None:
            self._cache.set(key, items)
        return items

    def _invalidate(self, key: QueryKey) -> None:
        if self._cache is not None:
            self._cache.invalidate(key)


class ProductionMonitor:
    """Counts down a lab's pending productions and collects finished ones.

    Every unfinished production gets its own :class:`CountdownTimer`. When
    one expires the monitor collects through a :class:`ThrottledAsync`, so
    several productions finishing together still produce one request, and
    then polls the lab again to pick up what is left.
    """

    def __init__(
        self,
        service: DrugLabService,
        lab_id: int,
        *,
        on_collected: Callable[[CollectResult], None] | None = None,
        cooldown_seconds: float = 0.2,
        tick_seconds: float = 1.0,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._service = service
        self._lab_id = _validate_id("lab_id", lab_id)
        self._on_collected = on_collected
        self._tick_seconds = tick_seconds
        self._scheduler = resolve_scheduler(scheduler)
        self._retry_handle: TimerHandle | None = None
        self._clock = clock or time.time
        self._timers: dict[int, CountdownTimer] = {}
        self._productions: tuple[Production, ...] = ()
        self._background = BackgroundTasks()
        self._collect: ThrottledAsync[CollectResult] = ThrottledAsync(
            self._collect_once,
            cooldown_seconds=cooldown_seconds,
            scheduler=self._scheduler,
            name="collect_production",
        )

    @property
    def lab_id(self) -> int:
        return self._lab_id

    @property
    def productions(self) -> tuple[Production, ...]:
        return self._productions

    @property
    def pending_ids(self) -> tuple[int, ...]:
        return tuple(sorted(self._timers))

    @property
    def collect_guard(self) -> ThrottledAsync[CollectResult]:
        return self._collect

    def countdown(self, production_id: int) -> CountdownTimer | None:
        return self._timers.get(production_id)

    async def refresh(self) -> tuple[Production, ...]:
        productions = await self._service.productions(self._lab_id, refresh=True)
        self.track(productions)
        return productions

    def track(self, productions: Iterable[Production]) -> None:
        self._productions = tuple(productions)
        pending = {p.id: p for p in self._productions if not p.is_completed}

        for production_id in [pid for pid in self._timers if pid not in pending]:
            self._timers.pop(production_id).close()

        for production_id, production in pending.items():
            target = production.completes_at.timestamp()
            timer = self._timers.get(production_id)
            if timer is None:
                self._timers[production_id] = CountdownTimer(
                    target,
                    on_expire=self._on_production_ready,
                    tick_seconds=self._tick_seconds,
                    scheduler=self._scheduler,
                    clock=self._clock,
                )
            elif timer.expires_at != target or (not timer.is_running and timer.has_expired):
                # changed target, or overdue but not collected yet
                timer.restart(target)
        logger.debug("tracking productions lab_id=%s pending=%s", self._lab_id, len(self._timers))

    async def collect(self) -> CollectResult | None:
        return await self._collect.execute()

    async def wait_pending(self) -> None:
        await self._background.wait()

    def close(self) -> None:
        self._collect.close()
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None
        for timer in self._timers.values():
            timer.close()
        self._timers.clear()
        self._background.cancel()

    def _on_production_ready(self) -> None:
        if self._collect.is_loading or self._collect.is_cooling_down:
            # check again on the next tick
            if self._retry_handle is None:
                self._retry_handle = self._scheduler.call_later(
                    self._tick_seconds,
                    self._retry_collect,
                )
            return
        self._background.spawn(self._collect.execute())

    def _retry_collect(self) -> None:
        self._retry_handle = None
        if any(timer.has_expired for timer in self._timers.values()):
            self._on_production_ready()

    async def _collect_once(self) -> CollectResult:
        result = await self._service.collect_production()
        logger.info(
            "production collected lab_id=%s successful=%s failed=%s",
            self._lab_id,
            result.successful_quantity,
            result.failed_quantity,
        )
        if self._on_collected is not None:
            self._on_collected(result)
        await self.refresh()
        return result


__all__ = [
    "DRUG_LABS_KEY",
    "USER_DRUGS_KEY",
    "production_key",
    "DrugLabService",
    "ProductionMonitor",
]
