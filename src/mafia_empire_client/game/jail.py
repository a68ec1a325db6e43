"""Jail endpoints and the escape/release flow built on the guards."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..core.async_transport import AsyncTransport, request_json_list, request_json_object
from ..core.background import BackgroundTasks
from ..core.countdown import CountdownTimer
from ..core.errors import MafiaApiError
from ..core.query_cache import QueryCache
from ..core.scheduler import Scheduler
from ..core.throttled_async import ThrottledAsync
from .models import EscapeResult, JailedUser, JailStatus, MessageResult
from .parser import (
    parse_escape_result,
    parse_jail_status,
    parse_jailed_user,
    parse_message_result,
)

JAIL_STATUS_KEY = ("/api/jail/status",)
JAILED_USERS_KEY = ("/api/jail/users",)
DEFAULT_ESCAPE_COOLDOWN_SECONDS = 30 * 60.0

logger = logging.getLogger("mafia_empire_client")


class JailService:
    """Thin async wrapper over the jail REST endpoints."""

    def __init__(self, transport: AsyncTransport, *, cache: QueryCache | None = None) -> None:
        self._transport = transport
        self._cache = cache

    async def status(self, *, refresh: bool = False) -> JailStatus:
        if not refresh and self._cache is not None:
            cached = self._cache.get(JAIL_STATUS_KEY)
            if cached is not None:
                return parse_jail_status(cached)
        payload = await request_json_object(self._transport, "GET", "/api/jail/status")
        if self._cache is not None:
            self._cache.set(JAIL_STATUS_KEY, payload)
        return parse_jail_status(payload)

    async def jailed_users(self) -> tuple[JailedUser, ...]:
        items = await request_json_list(self._transport, "GET", "/api/jail/users")
        return tuple(parse_jailed_user(item) for item in items)

    async def escape(self) -> EscapeResult:
        payload = await request_json_object(self._transport, "POST", "/api/jail/escape")
        result = parse_escape_result(payload)
        if self._cache is not None and (result.success or result.jail_time_end is not None):
            self._cache.invalidate(JAIL_STATUS_KEY)
        return result

    async def auto_release(self) -> MessageResult:
        payload = await request_json_object(self._transport, "POST", "/api/jail/auto-release")
        if self._cache is not None:
            self._cache.invalidate(JAIL_STATUS_KEY)
            self._cache.invalidate(JAILED_USERS_KEY)
        return parse_message_result(payload)


class JailEscapeFlow:
    """State behind the jail screen.

    Escape attempts go through a :class:`ThrottledAsync`, so double clicks
    send one request. A failed escape locks further attempts for
    ``escape_cooldown_seconds``. The release countdown tracks
    ``jail_time_end`` and, once it passes, asks the server to release the
    player and then calls ``on_release`` whether or not that request worked.
    """

    def __init__(
        self,
        service: JailService,
        *,
        escape_cooldown_seconds: float = DEFAULT_ESCAPE_COOLDOWN_SECONDS,
        action_cooldown_seconds: float = 0.2,
        tick_seconds: float = 1.0,
        on_release: Callable[[], None] | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._service = service
        self._escape_cooldown_seconds = escape_cooldown_seconds
        self._on_release = on_release
        self._clock = clock or time.time
        self._status: JailStatus | None = None
        self._background = BackgroundTasks()

        self._escape: ThrottledAsync[EscapeResult] = ThrottledAsync(
            self._attempt_escape,
            cooldown_seconds=action_cooldown_seconds,
            scheduler=scheduler,
            name="jail_escape",
        )
        self._escape_cooldown = CountdownTimer(
            None,
            tick_seconds=tick_seconds,
            auto_start=False,
            scheduler=scheduler,
            clock=self._clock,
        )
        self._release = CountdownTimer(
            None,
            on_expire=self._on_release_due,
            tick_seconds=tick_seconds,
            auto_start=False,
            scheduler=scheduler,
            clock=self._clock,
        )

    @property
    def status(self) -> JailStatus | None:
        return self._status

    @property
    def escape_guard(self) -> ThrottledAsync[EscapeResult]:
        return self._escape

    @property
    def escape_cooldown(self) -> CountdownTimer:
        return self._escape_cooldown

    @property
    def release_countdown(self) -> CountdownTimer:
        return self._release

    @property
    def can_escape(self) -> bool:
        if self._status is None or not self._status.is_jailed:
            return False
        cooldown = self._escape_cooldown
        if cooldown.expires_at is not None and not cooldown.has_expired:
            return False
        return not (self._escape.is_loading or self._escape.is_cooling_down)

    async def refresh(self, *, force: bool = True) -> JailStatus:
        status = await self._service.status(refresh=force)
        self._apply_status(status)
        return status

    async def attempt_escape(self) -> EscapeResult | None:
        if not self.can_escape:
            logger.debug("escape attempt ignored; not allowed right now")
            return None
        return await self._escape.execute()

    async def wait_pending(self) -> None:
        await self._background.wait()

    def close(self) -> None:
        self._escape.close()
        self._escape_cooldown.close()
        self._release.close()
        self._background.cancel()

    async def _attempt_escape(self) -> EscapeResult:
        result = await self._service.escape()
        if result.success:
            logger.info("escape succeeded")
            self._release.pause()
            await self.refresh()
            return result

        logger.info("escape failed; cooldown_seconds=%s", self._escape_cooldown_seconds)
        self._escape_cooldown.restart(self._clock() + self._escape_cooldown_seconds)
        if result.jail_time_end is not None:
            await self.refresh()
        return result

    def _apply_status(self, status: JailStatus) -> None:
        self._status = status
        if not status.is_jailed or status.jail_time_end is None:
            self._release.pause()
            return
        target = status.jail_time_end.timestamp()
        if self._release.expires_at == target and (
            self._release.is_running or self._release.has_expired
        ):
            return
        self._release.restart(target)

    def _on_release_due(self) -> None:
        self._background.spawn(self._auto_release())

    async def _auto_release(self) -> None:
        try:
            await self._service.auto_release()
        except MafiaApiError as exc:
            logger.warning("auto release failed error=%s", exc.__class__.__name__)
        if self._on_release is not None:
            self._on_release()


__all__ = [
    "JAIL_STATUS_KEY",
    "JAILED_USERS_KEY",
    "DEFAULT_ESCAPE_COOLDOWN_SECONDS",
    "JailService",
    "JailEscapeFlow",
]
