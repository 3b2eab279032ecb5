"""Base domain class and supporting types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Any


@dataclass
class ToolDefinition:
    """Agent-callable tool definition + handler."""

    name: str
    title: str
    description: str
    input_schema: dict
    handler: Callable[..., Any]

    def to_api_format(self) -> dict:
        """Convert to the tool listing format served to the agent."""
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "input_schema": self.input_schema
        }


class Domain(ABC):
    """Base class for all tool domains."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Domain identifier."""
        pass

    @property
    @abstractmethod
    def tools(self) -> list[ToolDefinition]:
        """Available tools for this domain."""
        pass

    def get_tool_definitions(self) -> list[dict]:
        """Format tools for the agent."""
        return [t.to_api_format() for t in self.tools]

    def get_tool_handler(self, name: str) -> Callable | None:
        """Get handler function by tool name."""
        for tool in self.tools:
            if tool.name == name:
                return tool.handler
        return None
