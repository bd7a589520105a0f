"""Environment configuration for the CityQuest MCP server."""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from .base_url import resolve_base_url

logger = logging.getLogger(__name__)

DEFAULT_SERVER_NAME = "cityquest-mcp"
DEFAULT_TEMPLATE_TIMEOUT = 10.0

# Fixed once per process so every widget in a deployment shares one id.
PROCESS_BUILD_ID = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")


def _timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_TEMPLATE_TIMEOUT
    value: float | None
    try:
        value = float(raw)
    except ValueError:
        value = None
    if value is None or not (math.isfinite(value) and value > 0):
        logger.warning(
            f"Ignoring CITYQUEST_TEMPLATE_TIMEOUT={raw!r}, "
            f"using {DEFAULT_TEMPLATE_TIMEOUT}s"
        )
        return DEFAULT_TEMPLATE_TIMEOUT
    return value


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup."""

    base_url: str
    build_id: str
    server_name: str = DEFAULT_SERVER_NAME
    template_timeout: float = DEFAULT_TEMPLATE_TIMEOUT

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        A malformed or non-positive timeout falls back to the default.

        Args:
            env: Environment mapping. Defaults to ``os.environ``.
        """
        if env is None:
            env = os.environ
        return cls(
            base_url=resolve_base_url(env),
            build_id=env.get("CITYQUEST_BUILD_ID") or PROCESS_BUILD_ID,
            server_name=env.get("CITYQUEST_SERVER_NAME") or DEFAULT_SERVER_NAME,
            template_timeout=_timeout(env.get("CITYQUEST_TEMPLATE_TIMEOUT")),
        )
