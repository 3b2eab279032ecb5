"""Reminder creation: validation, duplicate suppression and due-time computation."""

import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from logger import logger
from .aligner import utc_now
from .config import REMINDERS_TABLE, UNIT_MINUTES
from .errors import DuplicateReminderError, InvalidReminderError, PersistenceError
from .models import Reminder
from .store import Filter, ReminderStore


def compute_due_at(time_value: float, time_unit: str, now: datetime) -> datetime:
    """now + time_value units, truncated to the minute.

    Fractional values are allowed ("in 9 hours and 30 minutes" is 9.5 hours).
    """
    if time_unit not in UNIT_MINUTES:
        raise InvalidReminderError(
            f"Unsupported time unit: {time_unit!r} (expected one of {', '.join(UNIT_MINUTES)})"
        )
    if isinstance(time_value, bool) or not isinstance(time_value, (int, float)):
        raise InvalidReminderError(f"Time value must be a number, got {time_value!r}")
    if not math.isfinite(time_value) or time_value <= 0:
        raise InvalidReminderError(f"Time value must be positive, got {time_value!r}")

    # Halves round up: 0.5 minutes is one minute, not zero
    minutes = math.floor(time_value * UNIT_MINUTES[time_unit] + 0.5)
    if minutes < 1:
        raise InvalidReminderError(f"Time value rounds to less than a minute: {time_value!r} {time_unit}")
    due_at = now + timedelta(minutes=minutes)
    return due_at.replace(second=0, microsecond=0)


async def create_reminder(
    store: ReminderStore,
    target_id: str,
    name: str,
    description: str,
    time_value: float,
    time_unit: str,
    context_prompt: Optional[str] = None,
    clock: Callable[[], datetime] = utc_now
) -> Reminder:
    """Validate and persist a new reminder.

    The duplicate check is read-then-write and not transactional: two
    concurrent requests for the same target and description can both pass.

    Raises:
        InvalidReminderError: bad target, time value or unit (no store access)
        DuplicateReminderError: same target + description already stored (no write)
        PersistenceError: the store failed or did not confirm the insert
    """
    if not target_id or not str(target_id).strip():
        raise InvalidReminderError("A target id is required")

    due_at = compute_due_at(time_value, time_unit, clock())

    current = await store.select(
        REMINDERS_TABLE,
        [Filter("target_id", "eq", target_id)]
    )
    if any(row.get("description") == description for row in current):
        raise DuplicateReminderError(target_id, description)

    reminder = Reminder(
        target_id=target_id,
        name=name,
        description=description,
        context_prompt=context_prompt,
        due_at=due_at,
    )

    created = await store.insert(REMINDERS_TABLE, reminder.to_row())
    if not created:
        raise PersistenceError("Error inserting reminder")

    logger.info(f"Stored reminder for {target_id} due at {due_at.isoformat()}")
    return reminder
