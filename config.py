"""Global configuration for the reminder tools backend."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Supabase (reminders table)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Agent API - receives batches of due reminders
AGENT_API_URL = os.getenv("AGENT_API_URL")
AGENT_API_KEY = os.getenv("AGENT_API_KEY")

# Reminder polling interval in seconds (required for the scheduler to start)
_polling_interval = os.getenv("REMINDERS_POLLING_INTERVAL")
REMINDERS_POLLING_INTERVAL = float(_polling_interval) if _polling_interval else None

# Timeout for every outbound call (store + agent API)
REMINDERS_HTTP_TIMEOUT = float(os.getenv("REMINDERS_HTTP_TIMEOUT", "10"))

# HTTP server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

# Logging
LOG_DIR = Path(os.getenv("LOG_DIR", ".")) / "reminder-tools" / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
