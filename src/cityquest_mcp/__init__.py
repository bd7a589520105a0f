"""CityQuest MCP server: adventure widgets for AI assistants."""

__version__ = "0.1.0"
