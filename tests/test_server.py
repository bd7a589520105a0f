"""Tests for server startup wiring."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from mcp import types
from mcp.shared.exceptions import McpError

from cityquest_mcp.config import Settings
from cityquest_mcp.server import create_registry, server


def _offline(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


async def _startup(settings: Settings) -> int:
    async with httpx.AsyncClient(transport=httpx.MockTransport(_offline)) as client:
        registry = await create_registry(settings, client)
    return len(registry)


class TestCreateRegistry:
    def test_offline_web_app_skips_remote_widgets(self) -> None:
        settings = Settings(base_url="https://cityquest.example/", build_id="b1")
        assert asyncio.run(_startup(settings)) == 4


class TestPromptHandlers:
    def test_list_prompts(self) -> None:
        handler = server.request_handlers[types.ListPromptsRequest]
        result = asyncio.run(handler(types.ListPromptsRequest(method="prompts/list")))
        assert [p.name for p in result.root.prompts] == ["start-adventure"]

    def test_get_prompt(self) -> None:
        handler = server.request_handlers[types.GetPromptRequest]
        request = types.GetPromptRequest(
            method="prompts/get",
            params=types.GetPromptRequestParams(
                name="start-adventure",
                arguments={"name": "Rae", "adventureType": "tour", "location": "Pier 7"},
            ),
        )
        result = asyncio.run(handler(request))
        assert "Pier 7" in result.root.messages[0].content.text

    def test_get_unknown_prompt(self) -> None:
        handler = server.request_handlers[types.GetPromptRequest]
        request = types.GetPromptRequest(
            method="prompts/get",
            params=types.GetPromptRequestParams(name="missing"),
        )
        with pytest.raises(McpError):
            asyncio.run(handler(request))
