"""Tool registry - maps agent tool names to their domain handlers."""

from domains.base import Domain, ToolDefinition


class ToolRegistry:
    """Central registry for all tool domains."""

    def __init__(self):
        self._by_name: dict[str, Domain] = {}  # domain name → domain
        self._tools: dict[str, ToolDefinition] = {}  # tool name → tool

    def register(self, domain: Domain) -> None:
        """Register a domain and all of its tools."""
        self._by_name[domain.name] = domain
        for tool in domain.tools:
            if tool.name in self._tools:
                raise ValueError(f"Tool already registered: {tool.name}")
            self._tools[tool.name] = tool

    def get_by_name(self, name: str) -> Domain | None:
        """Get domain by name."""
        return self._by_name.get(name)

    def get_tool(self, name: str) -> ToolDefinition | None:
        """Get a tool by its agent-facing name."""
        return self._tools.get(name)

    def all_domains(self) -> list[Domain]:
        """Get all registered domains."""
        return list(self._by_name.values())

    def tool_definitions(self) -> list[dict]:
        """All registered tools in listing format."""
        return [tool.to_api_format() for tool in self._tools.values()]
