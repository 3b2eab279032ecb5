"""Reminder data model and its row/payload conversions."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from dateutil.parser import parse as parse_datetime


@dataclass
class Reminder:
    """A deferred message for a Discord user or channel."""
    target_id: str
    name: str
    description: str
    due_at: datetime  # Always UTC
    context_prompt: Optional[str] = None
    id: Optional[str] = None  # Assigned by the store

    @classmethod
    def from_row(cls, row: dict) -> "Reminder":
        """Build from a store row (due_date may be a string or datetime)."""
        due_at = row["due_date"]
        if isinstance(due_at, str):
            due_at = parse_datetime(due_at)
        # Ensure timezone aware
        if due_at.tzinfo is None:
            due_at = due_at.replace(tzinfo=timezone.utc)

        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            target_id=str(row["target_id"]),
            name=row.get("name") or "",
            description=row.get("description") or "",
            due_at=due_at.astimezone(timezone.utc),
            context_prompt=row.get("context_prompt"),
        )

    def to_row(self) -> dict:
        """Row for insertion; the store assigns the id."""
        return {
            "target_id": self.target_id,
            "name": self.name,
            "description": self.description,
            "context_prompt": self.context_prompt,
            "due_date": self.due_at.isoformat(),
        }

    def to_payload(self) -> dict:
        """Wire object sent to the agent API when the reminder fires."""
        payload = {
            "targetId": self.target_id,
            "userName": self.name,
            "description": self.description,
        }
        if self.context_prompt:
            payload["contextPrompt"] = self.context_prompt
        return payload
