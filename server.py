"""Reminder tools server - exposes agent tools over HTTP and runs the reminder poller.

Run with: python server.py  (or uvicorn server:app --port 3000)
"""

import inspect
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException

from config import HOST, PORT, REMINDERS_POLLING_INTERVAL
from logger import logger
from registry import ToolRegistry
from domains.reminders import (
    DispatchClient,
    ReminderPoller,
    ReminderScheduler,
    RemindersDomain,
    build_store,
)


def build_services() -> tuple[ToolRegistry, ReminderScheduler]:
    """Construct every long-lived client once and wire them together."""
    store = build_store()
    dispatcher = DispatchClient.from_config()

    registry = ToolRegistry()
    registry.register(RemindersDomain(store))

    poller = ReminderPoller(store, dispatcher)
    scheduler = ReminderScheduler(poller, REMINDERS_POLLING_INTERVAL)
    return registry, scheduler


def create_app(
    registry: Optional[ToolRegistry] = None,
    scheduler: Optional[ReminderScheduler] = None
) -> FastAPI:
    """Build the app; without arguments services are created from config at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the reminder poller on startup, stop it on shutdown."""
        if app.state.registry is None:
            app.state.registry, app.state.scheduler = build_services()

        if app.state.scheduler is not None:
            app.state.scheduler.start()
        logger.info(f"Server ready - {len(app.state.registry.tool_definitions())} tools registered")

        yield

        if app.state.scheduler is not None:
            app.state.scheduler.stop()

    app = FastAPI(
        title="Reminder Tools",
        description="Agent tools for Discord reminders",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.registry = registry
    app.state.scheduler = scheduler

    # ============================================================
    # Health Check
    # ============================================================

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    # ============================================================
    # Tools
    # ============================================================

    @app.get("/tools")
    async def list_tools():
        """Tool definitions for the agent."""
        return {"tools": app.state.registry.tool_definitions()}

    @app.post("/tools/{name}")
    async def call_tool(name: str, arguments: dict[str, Any] = Body(default={})):
        """Invoke a tool with JSON arguments."""
        tool = app.state.registry.get_tool(name)
        if tool is None:
            raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

        try:
            inspect.signature(tool.handler).bind(**arguments)
        except TypeError as e:
            raise HTTPException(status_code=422, detail=f"Invalid arguments for {name}: {e}")

        text = await tool.handler(**arguments)
        return {"content": [{"type": "text", "text": text}]}

    # ============================================================
    # Reminder Scheduler
    # ============================================================

    @app.get("/reminders/status")
    async def reminders_status():
        """Poller and scheduler state."""
        if app.state.scheduler is None:
            raise HTTPException(status_code=503, detail="Reminder scheduler not configured")
        return app.state.scheduler.get_status()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
