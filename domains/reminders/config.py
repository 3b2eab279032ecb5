"""Reminders domain configuration."""

import os

# Store table holding reminders
REMINDERS_TABLE = "reminders"

# First poll lands this many seconds past a minute boundary
TICK_OFFSET_SECONDS = 3

# Relative time units accepted by set_discord_reminder, in minutes
UNIT_MINUTES = {
    "minutes": 1,
    "hours": 60,
    "days": 24 * 60,
}

# Upper bound for a whole poll (select + dispatch + delete)
POLL_TIMEOUT_SECONDS = float(os.environ.get("REMINDERS_POLL_TIMEOUT", 45))

# APScheduler job id for the poller
POLL_JOB_ID = "reminder_polling"

# Per-tool switches
ENABLE_SET_REMINDER = os.environ.get("ENABLE_SET_DISCORD_REMINDER", "true").lower() in ("1", "true", "yes")
ENABLE_GET_REMINDERS = os.environ.get("ENABLE_GET_DISCORD_REMINDERS", "true").lower() in ("1", "true", "yes")

# Failed polls in a row before the poller logs the batch as stuck
STUCK_BATCH_THRESHOLD = 5
