from __future__ import annotations

import asyncio

import pytest

from mafia_empire_client.core.errors import (
    MafiaForbiddenError,
    MafiaProtocolError,
    MafiaServerError,
)
from mafia_empire_client.core.query_cache import QueryCache
from mafia_empire_client.game.jail import JAIL_STATUS_KEY, JailEscapeFlow, JailService
from tests.shared.payloads import make_escape, make_jail_status
from tests.shared.transport import ScriptedTransport

STATUS = ("GET", "/api/jail/status")
ESCAPE = ("POST", "/api/jail/escape")
RELEASE = ("POST", "/api/jail/auto-release")


def _flow(transport, scheduler, **kwargs) -> JailEscapeFlow:
    return JailEscapeFlow(
        JailService(transport),
        scheduler=scheduler,
        clock=scheduler.time,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_release_countdown_triggers_auto_release_once(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(*STATUS, make_jail_status(jailed=True, ends_at=start + 5, reason="Robbery"))
    transport.add(*RELEASE, {"message": "Released from jail"})
    released: list[int] = []
    flow = _flow(transport, scheduler, on_release=lambda: released.append(1))

    status = await flow.refresh()
    assert status.reason == "Robbery"
    assert flow.release_countdown.remaining_seconds == 5

    scheduler.advance(4.9)
    await flow.wait_pending()
    assert released == []

    scheduler.advance(0.1)
    await flow.wait_pending()
    assert released == [1]
    assert transport.count(*RELEASE) == 1

    scheduler.advance(60.0)
    await flow.wait_pending()
    assert released == [1]


@pytest.mark.asyncio
async def test_on_release_runs_even_when_auto_release_fails(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(*STATUS, make_jail_status(jailed=True, ends_at=start + 1))
    transport.add(*RELEASE, MafiaServerError("boom", http_status=500))
    released: list[int] = []
    flow = _flow(transport, scheduler, on_release=lambda: released.append(1))

    await flow.refresh()
    scheduler.advance(1.0)
    await flow.wait_pending()
    assert released == [1]


@pytest.mark.asyncio
async def test_concurrent_escape_attempts_send_one_request(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(
        *STATUS,
        make_jail_status(jailed=True, ends_at=start + 600),
        make_jail_status(jailed=False),
    )
    transport.add(*ESCAPE, make_escape(success=True, message="You escaped!"))
    flow = _flow(transport, scheduler)
    await flow.refresh()
    assert flow.can_escape is True

    first, second = await asyncio.gather(flow.attempt_escape(), flow.attempt_escape())

    assert first is not None
    assert first.success is True
    assert second is None
    assert transport.count(*ESCAPE) == 1
    assert flow.status is not None
    assert flow.status.is_jailed is False
    assert flow.release_countdown.is_running is False
    assert flow.can_escape is False


@pytest.mark.asyncio
async def test_failed_escape_locks_attempts_for_escape_cooldown(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(
        *STATUS,
        make_jail_status(jailed=True, ends_at=start + 3600),
        make_jail_status(jailed=True, ends_at=start + 7200),
    )
    transport.add(
        *ESCAPE,
        make_escape(success=False, message="Escape failed! Sentence extended.", ends_at=start + 7200),
    )
    flow = _flow(transport, scheduler, escape_cooldown_seconds=1800)
    await flow.refresh()

    result = await flow.attempt_escape()
    assert result is not None
    assert result.success is False
    assert flow.escape_cooldown.remaining_seconds == 1800
    assert flow.release_countdown.expires_at == start + 7200
    assert flow.can_escape is False

    scheduler.advance(1.0)
    assert await flow.attempt_escape() is None
    assert transport.count(*ESCAPE) == 1

    scheduler.advance(1799.0)
    assert flow.can_escape is True


@pytest.mark.asyncio
async def test_escape_error_is_kept_on_guard(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(*STATUS, make_jail_status(jailed=True, ends_at=start + 600))
    transport.add(*ESCAPE, MafiaForbiddenError("You are not in jail", http_status=403))
    flow = _flow(transport, scheduler)
    await flow.refresh()

    assert await flow.attempt_escape() is None
    assert isinstance(flow.escape_guard.error, MafiaForbiddenError)
    assert flow.escape_guard.is_error is True


@pytest.mark.asyncio
async def test_refresh_with_same_sentence_keeps_countdown(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(*STATUS, make_jail_status(jailed=True, ends_at=start + 10))
    flow = _flow(transport, scheduler)

    await flow.refresh()
    scheduler.advance(3.0)
    await flow.refresh()
    assert flow.release_countdown.percentage_remaining == 70


@pytest.mark.asyncio
async def test_service_status_is_cached_until_escape_invalidates_it(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(*STATUS, make_jail_status(jailed=True, ends_at=start + 600))
    transport.add(*ESCAPE, make_escape(success=True))
    cache = QueryCache(60.0)
    service = JailService(transport, cache=cache)

    await service.status()
    await service.status()
    assert transport.count(*STATUS) == 1

    await service.escape()
    assert cache.get(JAIL_STATUS_KEY) is None
    await service.status()
    assert transport.count(*STATUS) == 2


@pytest.mark.asyncio
async def test_close_stops_release_countdown(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(*STATUS, make_jail_status(jailed=True, ends_at=start + 2))
    released: list[int] = []
    flow = _flow(transport, scheduler, on_release=lambda: released.append(1))
    await flow.refresh()

    flow.close()
    scheduler.advance(10.0)
    await flow.wait_pending()
    assert released == []
    assert transport.count(*RELEASE) == 0


@pytest.mark.asyncio
async def test_escape_stays_locked_until_cooldown_fully_elapses(scheduler):
    start = scheduler.time()
    transport = ScriptedTransport()
    transport.add(*STATUS, make_jail_status(jailed=True, ends_at=start + 3600))
    transport.add(*ESCAPE, make_escape(success=False, message="Escape failed!"))
    flow = _flow(transport, scheduler, escape_cooldown_seconds=10)
    await flow.refresh()
    await flow.attempt_escape()

    scheduler.advance(9.5)
    assert flow.escape_cooldown.remaining_seconds == 0
    assert flow.can_escape is False
    assert await flow.attempt_escape() is None
    assert transport.count(*ESCAPE) == 1

    scheduler.advance(0.5)
    assert flow.can_escape is True


@pytest.mark.asyncio
async def test_jailed_users_lists_inmates_and_checks_shape():
    transport = ScriptedTransport()
    transport.add(
        "GET",
        "/api/jail/users",
        [
            {"id": 4, "username": "vito", "jailTimeEnd": "2024-05-01T10:30:00Z"},
            {"id": 9, "username": "sonny", "jailTimeEnd": None},
        ],
        {"users": []},
    )
    service = JailService(transport)

    users = await service.jailed_users()
    assert [user.username for user in users] == ["vito", "sonny"]
    assert users[1].jail_time_end is None

    with pytest.raises(MafiaProtocolError):
        await service.jailed_users()
