"""Wake-up alignment for the reminder poller.

The first poll is phase-shifted to land a fixed offset past a minute boundary,
so every restart converges on the same within-minute phase. Later polls run on
a plain fixed interval and are not realigned.
"""

from datetime import datetime, timedelta, timezone

from .config import TICK_OFFSET_SECONDS


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def seconds_until_next_tick(now: datetime, offset_seconds: int = TICK_OFFSET_SECONDS) -> float:
    """Delay from `now` until the next `offset_seconds` past a minute.

    Examples (offset 3):
        12:00:07 -> 56s (fires 12:01:03)
        12:00:01 -> 2s  (fires 12:00:03)
    """
    now = now.astimezone(timezone.utc)
    seconds = now.second
    milliseconds = now.microsecond // 1000

    if seconds < offset_seconds:
        delay_ms = (offset_seconds - seconds) * 1000 - milliseconds
    else:
        delay_ms = (60 - seconds + offset_seconds) * 1000 - milliseconds

    return delay_ms / 1000


def next_tick_at(now: datetime, offset_seconds: int = TICK_OFFSET_SECONDS) -> datetime:
    """Absolute time of the first aligned tick."""
    return now + timedelta(seconds=seconds_until_next_tick(now, offset_seconds))
