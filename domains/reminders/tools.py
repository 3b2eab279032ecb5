"""Agent-facing reminder tools."""

from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from logger import logger
from .aligner import utc_now
from .config import REMINDERS_TABLE
from .errors import DuplicateReminderError, InvalidReminderError, PersistenceError
from .models import Reminder
from .store import Filter, ReminderStore
from .validator import create_reminder


class ReminderOutcome(str, Enum):
    """Result of a set_reminder request."""
    CREATED = "created"
    DUPLICATE = "duplicate"
    PERSISTENCE_ERROR = "persistence-error"
    INVALID = "invalid"


OUTCOME_MESSAGES = {
    ReminderOutcome.CREATED: "Reminder correctly set up.",
    ReminderOutcome.DUPLICATE: "Reminder already exists",
    ReminderOutcome.PERSISTENCE_ERROR: "Error setting up reminder",
    ReminderOutcome.INVALID: (
        "Invalid reminder: use a positive relative time in minutes, hours or days "
        "(e.g. 30 minutes, 9.5 hours)"
    ),
}


async def set_reminder(
    store: ReminderStore,
    target_id: str,
    user_name: str,
    description: str,
    time_value: float,
    time_unit: str,
    context_prompt: Optional[str] = None,
    clock: Callable[[], datetime] = utc_now
) -> ReminderOutcome:
    """Create a reminder and report the outcome instead of raising."""
    logger.info(
        f"Attempting to store reminder for {target_id} ({user_name}): "
        f"{description!r} in {time_value} {time_unit}"
    )

    try:
        await create_reminder(
            store,
            target_id=target_id,
            name=user_name,
            description=description,
            context_prompt=context_prompt,
            time_value=time_value,
            time_unit=time_unit,
            clock=clock
        )
    except DuplicateReminderError:
        logger.info(f"Reminder already exists for {target_id}: {description!r}")
        return ReminderOutcome.DUPLICATE
    except InvalidReminderError as e:
        logger.warning(f"Rejected reminder for {target_id}: {e}")
        return ReminderOutcome.INVALID
    except PersistenceError as e:
        logger.error(f"Error setting up reminder for {target_id} ({description!r}): {e}")
        return ReminderOutcome.PERSISTENCE_ERROR

    return ReminderOutcome.CREATED


def format_time_left(due_at: datetime, now: datetime) -> str:
    """Whole days/hours/minutes until due, e.g. '1 days 2 hours 5 minutes'."""
    seconds_left = int((due_at - now).total_seconds())
    parts = []

    for label, unit_seconds in (("days", 86400), ("hours", 3600), ("minutes", 60)):
        if seconds_left >= unit_seconds:
            count = seconds_left // unit_seconds
            parts.append(f"{count} {label}")
            seconds_left -= count * unit_seconds

    return " ".join(parts)


def format_reminders(reminders: list[Reminder], now: datetime) -> str:
    """Numbered listing sorted by due time."""
    if not reminders:
        return "0 reminders found"

    lines = []
    for index, reminder in enumerate(sorted(reminders, key=lambda r: r.due_at), start=1):
        lines.append(
            f"{index}. [Reminder In {format_time_left(reminder.due_at, now)}]\n"
            f"- **Description**\n{reminder.description}\n"
            f"- **Context**\n{reminder.context_prompt or ''}"
        )
    return "\n".join(lines)


async def get_reminders(
    store: ReminderStore,
    recipient_id: str,
    clock: Callable[[], datetime] = utc_now
) -> str:
    """Pending reminders for a user or channel, formatted for the agent."""
    logger.info(f"Attempting to fetch reminders for {recipient_id}")

    try:
        rows = await store.select(REMINDERS_TABLE, [Filter("target_id", "eq", recipient_id)])
    except PersistenceError as e:
        logger.error(f"Error fetching reminders for {recipient_id}: {e}")
        return "Error fetching reminders"

    return format_reminders([Reminder.from_row(row) for row in rows], clock())


SET_REMINDER_SCHEMA = {
    "type": "object",
    "properties": {
        "targetId": {
            "type": "string",
            "description": "Discord recipient Id where the message will be sent to. Can be either an User Id or a Channel Id."
        },
        "userName": {
            "type": "string",
            "description": "Discord user name of the recipient."
        },
        "description": {
            "type": "string",
            "description": "Description of what the user wants to be messaged about, include any context as needed."
        },
        "prompt": {
            "type": "string",
            "description": "Context prompt that will be given to an AI Agent when the message is triggered to give it more context when messaging the user."
        },
        "timeValue": {
            "type": "number",
            "description": (
                "The value of the relative time when the message will be triggered. Decimals can be used to "
                "represent fractions when needed (e.g., \"in 9 hours and 30 minutes\" would translate to 9.5 hours)."
            )
        },
        "timeUnit": {
            "type": "string",
            "enum": ["minutes", "hours", "days"],
            "description": "The time unit of the relative time when the message will be triggered."
        }
    },
    "required": ["targetId", "userName", "description", "timeValue", "timeUnit"]
}

SET_REMINDER_DESCRIPTION = """Sets a reminder or scheduled message to be sent through Discord to a specific recipient (an User or a Channel).

Requires a relative time (e.g., "in 30 minutes", "in 2 hours").
If the user provides an absolute time (like "at 3 PM" or "tomorrow at noon") ask them to rephrase using a relative format.
Do not assume the user's time zone.

Always call the get_discord_reminders tool first to check whether the reminder already exists."""

GET_REMINDERS_SCHEMA = {
    "type": "object",
    "properties": {
        "recipientId": {
            "type": "string",
            "description": "Discord Id recipient of the messages. Can be an User Id or a Channel Id."
        }
    },
    "required": ["recipientId"]
}
