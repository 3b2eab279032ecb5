"""Tool domains exposed to the agent."""

from .base import Domain, ToolDefinition

__all__ = ["Domain", "ToolDefinition"]
