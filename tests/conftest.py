"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest

from domains.reminders import InMemoryReminderStore


class FixedClock:
    """Injectable clock; tests move time by assigning `now`."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    """Clock pinned to 2026-10-17 12:00:00 UTC."""
    return FixedClock(datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_store():
    """Fresh in-memory reminder store."""
    return InMemoryReminderStore()


@pytest.fixture
def mock_dispatcher():
    """Dispatch client that acknowledges every batch."""
    dispatcher = Mock()
    dispatcher.dispatch = AsyncMock(return_value=True)
    return dispatcher


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx client."""
    with patch('httpx.AsyncClient') as mock:
        client = AsyncMock()
        mock.return_value.__aenter__.return_value = client
        yield client
