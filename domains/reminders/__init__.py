"""Reminders module for deferred Discord messages.

Reminders are stored with a computed UTC due time; a minute-aligned poller
forwards due reminders to the agent API in one batch and then removes them.
"""

from .aligner import seconds_until_next_tick, next_tick_at, utc_now
from .dispatch import DispatchClient
from .domain import RemindersDomain
from .errors import (
    ReminderError,
    InvalidReminderError,
    DuplicateReminderError,
    PersistenceError,
    DispatchError,
    ConfigurationError,
)
from .models import Reminder
from .poller import ReminderPoller
from .scheduler import ReminderScheduler
from .store import (
    Filter,
    ReminderStore,
    SupabaseReminderStore,
    InMemoryReminderStore,
    build_store,
)
from .tools import ReminderOutcome, set_reminder, get_reminders
from .validator import compute_due_at, create_reminder

__all__ = [
    "seconds_until_next_tick",
    "next_tick_at",
    "utc_now",
    "DispatchClient",
    "RemindersDomain",
    "ReminderError",
    "InvalidReminderError",
    "DuplicateReminderError",
    "PersistenceError",
    "DispatchError",
    "ConfigurationError",
    "Reminder",
    "ReminderPoller",
    "ReminderScheduler",
    "Filter",
    "ReminderStore",
    "SupabaseReminderStore",
    "InMemoryReminderStore",
    "build_store",
    "ReminderOutcome",
    "set_reminder",
    "get_reminders",
    "compute_due_at",
    "create_reminder",
]
