"""Tests for the due-reminder poller."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from domains.reminders.config import REMINDERS_TABLE, STUCK_BATCH_THRESHOLD
from domains.reminders.errors import PersistenceError
from domains.reminders.poller import ReminderPoller
from domains.reminders.store import Filter


async def _add(store, clock, target_id, description, minutes_from_now, prompt=None):
    due = clock() + timedelta(minutes=minutes_from_now)
    await store.insert(REMINDERS_TABLE, {
        "target_id": target_id,
        "name": f"user-{target_id}",
        "description": description,
        "context_prompt": prompt,
        "due_date": due.isoformat(),
    })


@pytest.mark.asyncio
async def test_nothing_due_no_dispatch_no_delete(memory_store, mock_dispatcher, clock):
    """A poll with nothing due is a single read."""
    await _add(memory_store, clock, "1", "later", 30)
    store = AsyncMock(wraps=memory_store)
    poller = ReminderPoller(store, mock_dispatcher, clock=clock)

    assert await poller.poll_once() == 0

    store.select.assert_called_once()
    mock_dispatcher.dispatch.assert_not_called()
    store.delete.assert_not_called()


@pytest.mark.asyncio
async def test_due_reminders_sent_in_one_batch(memory_store, mock_dispatcher, clock):
    await _add(memory_store, clock, "1", "first", -5, prompt="be nice")
    await _add(memory_store, clock, "2", "second", -1)
    await _add(memory_store, clock, "3", "third", 0)  # Due exactly now
    await _add(memory_store, clock, "4", "future", 10)
    poller = ReminderPoller(memory_store, mock_dispatcher, clock=clock)

    assert await poller.poll_once() == 3

    mock_dispatcher.dispatch.assert_called_once()
    batch = mock_dispatcher.dispatch.call_args.args[0]
    assert batch == [
        {"targetId": "1", "userName": "user-1", "description": "first", "contextPrompt": "be nice"},
        {"targetId": "2", "userName": "user-2", "description": "second"},
        {"targetId": "3", "userName": "user-3", "description": "third"},
    ]


@pytest.mark.asyncio
async def test_dispatched_reminders_removed(memory_store, mock_dispatcher, clock):
    await _add(memory_store, clock, "1", "first", -5)
    await _add(memory_store, clock, "2", "future", 10)
    poller = ReminderPoller(memory_store, mock_dispatcher, clock=clock)

    await poller.poll_once()

    due = await memory_store.select(REMINDERS_TABLE, [Filter("due_date", "lte", clock())])
    assert due == []
    remaining = await memory_store.select(REMINDERS_TABLE)
    assert [r["description"] for r in remaining] == ["future"]

    # Second poll finds nothing
    assert await poller.poll_once() == 0
    assert mock_dispatcher.dispatch.call_count == 1


@pytest.mark.asyncio
async def test_failed_dispatch_keeps_reminders(memory_store, mock_dispatcher, clock):
    await _add(memory_store, clock, "1", "first", -5)
    mock_dispatcher.dispatch.return_value = False
    poller = ReminderPoller(memory_store, mock_dispatcher, clock=clock)

    assert await poller.poll_once() == 0

    assert len(await memory_store.select(REMINDERS_TABLE)) == 1
    assert poller.failed_batches == 1

    # Retried on the next poll once the agent API recovers
    mock_dispatcher.dispatch.return_value = True
    assert await poller.poll_once() == 1
    assert await memory_store.select(REMINDERS_TABLE) == []


@pytest.mark.asyncio
async def test_raising_dispatch_does_not_escape(memory_store, mock_dispatcher, clock):
    await _add(memory_store, clock, "1", "first", -5)
    mock_dispatcher.dispatch.side_effect = RuntimeError("boom")
    poller = ReminderPoller(memory_store, mock_dispatcher, clock=clock)

    assert await poller.poll_once() == 0
    assert not poller.in_progress

    # Next tick still works
    mock_dispatcher.dispatch.side_effect = None
    mock_dispatcher.dispatch.return_value = True
    assert await poller.poll_once() == 1


@pytest.mark.asyncio
async def test_store_failure_ends_poll_quietly(mock_dispatcher, clock):
    store = AsyncMock()
    store.select.side_effect = PersistenceError("supabase down")
    poller = ReminderPoller(store, mock_dispatcher, clock=clock)

    assert await poller.poll_once() == 0
    mock_dispatcher.dispatch.assert_not_called()


@pytest.mark.asyncio
async def test_delete_filter_narrowed_to_dispatched_ids(memory_store, mock_dispatcher, clock):
    await _add(memory_store, clock, "1", "first", -5)
    store = AsyncMock(wraps=memory_store)
    poller = ReminderPoller(store, mock_dispatcher, clock=clock)

    await poller.poll_once()

    store.delete.assert_called_once()
    table, filters = store.delete.call_args.args
    assert table == REMINDERS_TABLE
    assert filters[0] == Filter("due_date", "lte", clock())
    assert filters[1].field == "id"
    assert filters[1].operator == "in"
    assert len(filters[1].value) == 1


@pytest.mark.asyncio
async def test_overlapping_poll_is_skipped(memory_store, clock):
    await _add(memory_store, clock, "1", "first", -5)
    release = asyncio.Event()

    async def slow_dispatch(batch):
        await release.wait()
        return True

    dispatcher = AsyncMock()
    dispatcher.dispatch.side_effect = slow_dispatch
    poller = ReminderPoller(memory_store, dispatcher, clock=clock)

    first = asyncio.create_task(poller.poll_once())
    await asyncio.sleep(0)
    assert poller.in_progress

    # Overlapping tick returns immediately without a second dispatch
    assert await poller.poll_once() == 0
    assert poller.skipped_polls == 1

    release.set()
    assert await first == 1
    assert dispatcher.dispatch.call_count == 1


@pytest.mark.asyncio
async def test_refused_batch_streak_tracked_and_reset(memory_store, mock_dispatcher, clock):
    await _add(memory_store, clock, "1", "first", -5)
    mock_dispatcher.dispatch.return_value = False
    poller = ReminderPoller(memory_store, mock_dispatcher, clock=clock)

    for _ in range(STUCK_BATCH_THRESHOLD + 1):
        assert await poller.poll_once() == 0

    assert poller.get_stats()["consecutive_failures"] == STUCK_BATCH_THRESHOLD + 1
    assert len(await memory_store.select(REMINDERS_TABLE)) == 1

    mock_dispatcher.dispatch.return_value = True
    assert await poller.poll_once() == 1
    assert poller.consecutive_failures == 0
    assert poller.failed_batches == STUCK_BATCH_THRESHOLD + 1
