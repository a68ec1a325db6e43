from __future__ import annotations

import pytest

from mafia_empire_client.async_client import AsyncMafiaClient
from mafia_empire_client.config import CacheConfig, GuardConfig, MafiaClientConfig
from mafia_empire_client.core.errors import MafiaClientClosedError, MafiaValidationError
from mafia_empire_client.core.query_cache import QueryCache
from tests.shared.payloads import make_jail_status
from tests.shared.transport import ScriptedTransport, build_config


@pytest.mark.asyncio
async def test_async_client_context_manager_closes_transport():
    transport = ScriptedTransport()
    async with AsyncMafiaClient(config=build_config(), transport=transport) as client:
        assert client is not None
    assert transport.closed is True


@pytest.mark.asyncio
async def test_async_client_raises_when_used_after_close():
    client = AsyncMafiaClient(config=build_config(), transport=ScriptedTransport())
    await client.close()
    await client.close()
    with pytest.raises(MafiaClientClosedError):
        _ = client.jail
    with pytest.raises(MafiaClientClosedError):
        client.production_monitor(1)


def test_async_client_maps_invalid_config_to_validation_error():
    with pytest.raises(MafiaValidationError, match="base_url"):
        AsyncMafiaClient(config=MafiaClientConfig(base_url=""), transport=ScriptedTransport())


@pytest.mark.asyncio
async def test_each_client_owns_its_cache():
    first = AsyncMafiaClient(config=build_config(), transport=ScriptedTransport())
    second = AsyncMafiaClient(config=build_config(), transport=ScriptedTransport())
    assert first.cache is not None
    assert first.cache is not second.cache

    shared = QueryCache()
    injected = AsyncMafiaClient(config=build_config(), transport=ScriptedTransport(), cache=shared)
    assert injected.cache is shared

    disabled = AsyncMafiaClient(
        config=build_config(cache=CacheConfig(enabled=False)),
        transport=ScriptedTransport(),
    )
    assert disabled.cache is None


@pytest.mark.asyncio
async def test_jail_status_goes_through_client_cache_and_close_clears_it():
    transport = ScriptedTransport()
    transport.add("GET", "/api/jail/status", make_jail_status(jailed=False))
    client = AsyncMafiaClient(config=build_config(), transport=transport)

    await client.jail.status()
    await client.jail.status()
    assert transport.count("GET", "/api/jail/status") == 1
    assert client.cache is not None
    assert len(client.cache) == 1

    await client.close()
    assert len(client.cache) == 0


@pytest.mark.asyncio
async def test_flows_inherit_guard_windows_from_config(scheduler):
    config = build_config(
        guards=GuardConfig(
            throttle_seconds=2.0,
            debounce_seconds=0.7,
            async_cooldown_seconds=1.5,
            escape_cooldown_seconds=60.0,
        )
    )
    client = AsyncMafiaClient(config=config, transport=ScriptedTransport(), scheduler=scheduler)

    flow = client.jail_escape_flow(clock=scheduler.time)
    monitor = client.production_monitor(2, clock=scheduler.time)

    assert monitor.lab_id == 2
    assert flow.escape_guard.status.value == "idle"

    clicks: list[int] = []
    button = client.throttle_button("Rob", lambda: clicks.append(1))
    assert button.click() is True
    scheduler.advance(1.9)
    assert button.is_busy is True
    scheduler.advance(0.1)
    assert button.is_busy is False

    changes: list[str] = []
    field = client.throttled_input(changes.append)
    field.type("vito")
    scheduler.advance(0.69)
    assert changes == []
    scheduler.advance(0.01)
    assert changes == ["vito"]

    flow.close()
    monitor.close()
    await client.close()
