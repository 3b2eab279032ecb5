"""Reminder error types."""

from typing import Optional


class ReminderError(Exception):
    """Base class for reminder errors."""


class InvalidReminderError(ReminderError, ValueError):
    """Reminder input rejected before touching the store."""


class DuplicateReminderError(ReminderError):
    """A reminder with the same target and description already exists."""

    def __init__(self, target_id: str, description: str):
        super().__init__(f"Reminder already exists for {target_id}: {description!r}")
        self.target_id = target_id
        self.description = description


class PersistenceError(ReminderError):
    """Store select/insert/delete failed."""


class DispatchError(ReminderError):
    """Forwarding a batch of due reminders failed.

    `status_code` is set when the agent API answered with a non-2xx status
    and is None for transport failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def rejected(self) -> bool:
        return self.status_code is not None


class ConfigurationError(ReminderError):
    """Required configuration is missing or invalid."""
