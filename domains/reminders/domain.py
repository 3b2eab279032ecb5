"""Reminders domain implementation."""

from datetime import datetime
from typing import Callable, Optional

from domains.base import Domain, ToolDefinition
from .aligner import utc_now
from .config import ENABLE_SET_REMINDER, ENABLE_GET_REMINDERS
from .store import ReminderStore
from .tools import (
    OUTCOME_MESSAGES,
    SET_REMINDER_SCHEMA,
    SET_REMINDER_DESCRIPTION,
    GET_REMINDERS_SCHEMA,
    set_reminder,
    get_reminders,
)


class RemindersDomain(Domain):
    """Discord reminders and scheduled messages."""

    def __init__(
        self,
        store: ReminderStore,
        enable_set: bool = ENABLE_SET_REMINDER,
        enable_get: bool = ENABLE_GET_REMINDERS,
        clock: Callable[[], datetime] = utc_now
    ):
        self.store = store
        self.clock = clock
        self._tools: list[ToolDefinition] = []

        if enable_set:
            self._tools.append(ToolDefinition(
                name="set_discord_reminder",
                title="Set Discord Reminder or Scheduled Message",
                description=SET_REMINDER_DESCRIPTION,
                input_schema=SET_REMINDER_SCHEMA,
                handler=self.handle_set_reminder
            ))

        if enable_get:
            self._tools.append(ToolDefinition(
                name="get_discord_reminders",
                title="Get Discord Reminders or Scheduled Messages for a given User or Channel Id.",
                description="Gets all of the messages that have yet to trigger of a given Discord User or Channel.",
                input_schema=GET_REMINDERS_SCHEMA,
                handler=self.handle_get_reminders
            ))

    @property
    def name(self) -> str:
        return "reminders"

    @property
    def tools(self) -> list[ToolDefinition]:
        return self._tools

    async def handle_set_reminder(
        self,
        targetId: str,
        userName: str,
        description: str,
        timeValue: float,
        timeUnit: str,
        prompt: Optional[str] = None
    ) -> str:
        outcome = await set_reminder(
            self.store,
            target_id=targetId,
            user_name=userName,
            description=description,
            context_prompt=prompt,
            time_value=timeValue,
            time_unit=timeUnit,
            clock=self.clock
        )
        return OUTCOME_MESSAGES[outcome]

    async def handle_get_reminders(self, recipientId: str) -> str:
        return await get_reminders(self.store, recipientId, clock=self.clock)
