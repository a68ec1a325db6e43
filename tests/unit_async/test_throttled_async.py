from __future__ import annotations

import asyncio

import pytest

from mafia_empire_client.core.throttled_async import AsyncStatus, ThrottledAsync


class _Gate:
    """Async action that blocks until released."""

    def __init__(self) -> None:
        self.calls = 0
        self.event = asyncio.Event()

    async def __call__(self, value: str = "ok") -> str:
        self.calls += 1
        await self.event.wait()
        return value


@pytest.mark.asyncio
async def test_second_execute_while_loading_is_dropped(scheduler):
    gate = _Gate()
    guard = ThrottledAsync(gate, cooldown_seconds=0.2, scheduler=scheduler)

    first = asyncio.create_task(guard.execute("first"))
    await asyncio.sleep(0)
    assert guard.status is AsyncStatus.LOADING

    assert await guard.execute("second") is None
    gate.event.set()
    assert await first == "first"
    assert gate.calls == 1
    assert guard.result == "first"


@pytest.mark.asyncio
async def test_cooldown_follows_success_then_returns_to_idle(scheduler):
    statuses: list[AsyncStatus] = []
    calls: list[int] = []

    async def action() -> int:
        calls.append(1)
        return len(calls)

    guard = ThrottledAsync(
        action,
        cooldown_seconds=0.2,
        scheduler=scheduler,
        on_status_change=statuses.append,
    )

    assert await guard.execute() == 1
    assert guard.is_success is True
    assert guard.is_cooling_down is True
    assert await guard.execute() is None
    assert calls == [1]

    scheduler.advance(0.2)
    assert guard.status is AsyncStatus.IDLE
    assert await guard.execute() == 2
    assert statuses == [
        AsyncStatus.LOADING,
        AsyncStatus.SUCCESS,
        AsyncStatus.IDLE,
        AsyncStatus.LOADING,
        AsyncStatus.SUCCESS,
    ]


@pytest.mark.asyncio
async def test_error_is_stored_not_raised_and_also_cools_down(scheduler):
    async def action() -> None:
        raise RuntimeError("You are already in jail")

    guard = ThrottledAsync(action, cooldown_seconds=0.2, scheduler=scheduler)

    assert await guard.execute() is None
    assert guard.is_error is True
    assert isinstance(guard.error, RuntimeError)
    assert guard.is_cooling_down is True

    scheduler.advance(0.2)
    assert guard.status is AsyncStatus.IDLE
    assert isinstance(guard.error, RuntimeError)


@pytest.mark.asyncio
async def test_next_execute_clears_previous_error(scheduler):
    outcomes = [RuntimeError("first"), "second"]

    async def action() -> str:
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    guard = ThrottledAsync(action, cooldown_seconds=0.2, scheduler=scheduler)
    await guard.execute()
    scheduler.advance(0.2)
    assert await guard.execute() == "second"
    assert guard.error is None


@pytest.mark.asyncio
async def test_abort_returns_to_idle_without_cooldown(scheduler):
    gate = _Gate()
    guard = ThrottledAsync(gate, cooldown_seconds=5.0, scheduler=scheduler)

    pending = asyncio.create_task(guard.execute())
    await asyncio.sleep(0)
    assert guard.abort() is True
    assert guard.status is AsyncStatus.IDLE
    assert await pending is None
    assert guard.is_cooling_down is False
    assert guard.abort() is False

    gate.event.set()
    assert await guard.execute("again") == "again"


@pytest.mark.asyncio
async def test_reset_ends_cooldown_early(scheduler):
    async def action() -> str:
        return "done"

    guard = ThrottledAsync(action, cooldown_seconds=10.0, scheduler=scheduler)
    await guard.execute()
    guard.reset()
    assert guard.status is AsyncStatus.IDLE
    assert guard.result is None
    assert scheduler.pending == []
    assert await guard.execute() == "done"


@pytest.mark.asyncio
async def test_close_drops_calls_and_silences_listener(scheduler):
    statuses: list[AsyncStatus] = []
    gate = _Gate()
    guard = ThrottledAsync(gate, scheduler=scheduler, on_status_change=statuses.append)

    pending = asyncio.create_task(guard.execute())
    await asyncio.sleep(0)
    guard.close()
    assert await pending is None
    assert await guard.execute() is None
    assert gate.calls <= 1
    assert guard.status is AsyncStatus.IDLE
    assert guard.is_loading is False
    assert statuses == [AsyncStatus.LOADING]
    assert scheduler.pending == []


@pytest.mark.asyncio
async def test_zero_cooldown_allows_immediate_retry(scheduler):
    calls: list[int] = []

    async def action() -> None:
        calls.append(1)

    guard = ThrottledAsync(action, cooldown_seconds=0, scheduler=scheduler)
    await guard.execute()
    await guard.execute()
    assert calls == [1, 1]
