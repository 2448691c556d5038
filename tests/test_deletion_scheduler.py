import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from chatwarden.scheduler.deletion_scheduler import DeletionScheduler, PendingDeletion


def make_message(message_id: int):
    return SimpleNamespace(id=message_id, delete=AsyncMock())


@pytest.mark.asyncio
async def test_schedule_immediate_deletes_now() -> None:
    scheduler = DeletionScheduler()
    message = make_message(1)

    await scheduler.schedule(message, 0)

    message.delete.assert_awaited_once()
    assert scheduler.runner_task is None
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_scheduled_deletion_runs_after_delay() -> None:
    scheduler = DeletionScheduler()
    message = make_message(2)

    await scheduler.schedule(message, 0.05)
    message.delete.assert_not_awaited()

    await asyncio.sleep(0.3)

    message.delete.assert_awaited_once()
    assert scheduler.pending_keys == {}
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_schedule_and_cancel_pending_job() -> None:
    scheduler = DeletionScheduler()
    message = make_message(3)

    await scheduler.schedule(message, 0.05)
    assert 3 in scheduler.pending_keys

    assert await scheduler.cancel(3) is True
    assert await scheduler.cancel(3) is False

    await asyncio.sleep(0.2)
    message.delete.assert_not_awaited()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_rescheduling_replaces_previous_job() -> None:
    scheduler = DeletionScheduler()
    message = make_message(4)

    await scheduler.schedule(message, 0.05)
    await scheduler.schedule(message, 0.1)

    await asyncio.sleep(0.4)

    message.delete.assert_awaited_once()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_schedule_nowait_queues_from_sync_code() -> None:
    scheduler = DeletionScheduler()
    message = make_message(5)

    scheduler.schedule_nowait(message, 0)
    assert len(scheduler.schedule_tasks) == 1

    await asyncio.sleep(0.05)

    message.delete.assert_awaited_once()
    assert scheduler.schedule_tasks == set()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_shutdown_drops_pending_deletions() -> None:
    scheduler = DeletionScheduler()
    message = make_message(6)

    await scheduler.schedule(message, 0.05)
    await scheduler.shutdown()
    await asyncio.sleep(0.2)

    message.delete.assert_not_awaited()
    assert scheduler.runner_task is None
    assert scheduler.heap == []


@pytest.mark.asyncio
async def test_execute_handles_not_found() -> None:
    scheduler = DeletionScheduler()

    class DummyNotFound(Exception):
        pass

    message = make_message(7)
    message.delete.side_effect = DummyNotFound("gone")

    with patch("chatwarden.scheduler.deletion_scheduler.discord.NotFound", DummyNotFound):
        await scheduler.execute(PendingDeletion(message=message, key=7))

    message.delete.assert_awaited_once()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_execute_swallows_unexpected_errors() -> None:
    scheduler = DeletionScheduler()
    message = make_message(8)
    message.delete.side_effect = RuntimeError("network")

    await scheduler.execute(PendingDeletion(message=message, key=8))

    message.delete.assert_awaited_once()
    await scheduler.shutdown()
