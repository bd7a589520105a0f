"""MCP Server for CityQuest - serves the adventure widgets to AI assistants.

This server provides:
- Widget tools (start the adventure, update the score, recap in video, ...)
- The HTML resource paired with each tool, under a build-qualified URI
- The start-adventure game master prompt
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from .catalog import build_catalog
from .config import Settings
from .errors import CityQuestError
from .prompts import PROMPTS, get_prompt as render_prompt
from .registry import WidgetRegistry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = Settings.from_env()

# MCP Server instance
server = Server(settings.server_name)


@server.list_prompts()  # type: ignore
async def list_prompts() -> list[types.Prompt]:
    """List available CityQuest prompts."""
    return PROMPTS


@server.get_prompt()  # type: ignore
async def get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
    """Render a CityQuest prompt."""
    try:
        return render_prompt(name, arguments)
    except CityQuestError as e:
        raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=str(e))) from e


async def create_registry(
    config: Settings, http_client: httpx.AsyncClient | None = None
) -> WidgetRegistry:
    """Build the catalog and register every widget.

    Entries whose markup cannot be materialized are skipped.
    """
    registry = WidgetRegistry(config.build_id, config.base_url)
    catalog = build_catalog(config.base_url, http_client, config.template_timeout)
    await registry.register_all(catalog)
    return registry


async def main() -> None:
    """Run the MCP server."""
    logger.info(
        f"Starting CityQuest MCP server (build {settings.build_id}, "
        f"base url {settings.base_url})"
    )

    async with httpx.AsyncClient(timeout=settings.template_timeout) as http_client:
        registry = await create_registry(settings, http_client)
    if len(registry) == 0:
        logger.warning("No widgets registered; serving prompts only")
    registry.attach(server)

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def run() -> None:
    """Entry point for the MCP server."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
