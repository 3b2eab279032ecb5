"""Find due reminders and forward them to the agent API."""

import asyncio
from datetime import datetime
from typing import Callable, Optional

from logger import logger
from .aligner import utc_now
from .config import REMINDERS_TABLE, STUCK_BATCH_THRESHOLD
from .dispatch import DispatchClient
from .models import Reminder
from .store import Filter, ReminderStore


class ReminderPoller:
    """One poll = select due -> dispatch as one batch -> delete dispatched.

    Dispatched reminders are only deleted once the agent API acknowledged the
    batch; on failure they stay due and go out again on the next poll. There is
    no attempt cap, so a batch the agent API refuses outright keeps every due
    reminder waiting. `consecutive_failures` counts that streak and the log
    escalates once it reaches STUCK_BATCH_THRESHOLD.
    """

    def __init__(
        self,
        store: ReminderStore,
        dispatcher: DispatchClient,
        clock: Callable[[], datetime] = utc_now
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.clock = clock

        self._lock = asyncio.Lock()

        # Stats for the status endpoint
        self.last_poll_at: Optional[datetime] = None
        self.dispatched_total = 0
        self.failed_batches = 0
        self.consecutive_failures = 0
        self.skipped_polls = 0

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    async def poll_once(self) -> int:
        """Run a single poll.

        Never raises: every failure is logged and ends this poll only. A call
        made while another poll is still running is skipped.

        Returns:
            Number of reminders dispatched and removed
        """
        if self._lock.locked():
            self.skipped_polls += 1
            logger.warning("Reminder poll still in progress, skipping this tick")
            return 0

        async with self._lock:
            try:
                return await self._poll()
            except Exception as e:
                logger.error(f"Error polling reminders: {e}", exc_info=True)
                return 0

    async def _poll(self) -> int:
        now = self.clock()
        self.last_poll_at = now
        due_filter = Filter("due_date", "lte", now)

        rows = await self.store.select(REMINDERS_TABLE, [due_filter])
        if not rows:
            return 0

        reminders = [Reminder.from_row(row) for row in rows]
        batch = [reminder.to_payload() for reminder in reminders]

        if not await self.dispatcher.dispatch(batch):
            self.failed_batches += 1
            self.consecutive_failures += 1
            if self.consecutive_failures >= STUCK_BATCH_THRESHOLD:
                logger.error(
                    f"Reminder batch has failed {self.consecutive_failures} polls in a row; "
                    f"{len(reminders)} due reminders are stuck until the agent API accepts them"
                )
            else:
                logger.warning(f"Keeping {len(reminders)} due reminders for the next poll")
            return 0

        self.consecutive_failures = 0
        ids = [r.id for r in reminders if r.id is not None]
        # Narrowed to the dispatched ids so reminders that became due mid-poll survive
        deleted = await self.store.delete(REMINDERS_TABLE, [due_filter, Filter("id", "in", ids)])
        if not deleted:
            logger.error(f"Dispatched {len(ids)} reminders but failed to delete them: {ids}")

        self.dispatched_total += len(reminders)
        logger.info(f"Successfully triggered {len(reminders)} reminders")
        return len(reminders)

    def get_stats(self) -> dict:
        return {
            "in_progress": self.in_progress,
            "last_poll_at": self.last_poll_at.isoformat() if self.last_poll_at else None,
            "dispatched_total": self.dispatched_total,
            "failed_batches": self.failed_batches,
            "consecutive_failures": self.consecutive_failures,
            "skipped_polls": self.skipped_polls,
        }
