"""Resolve the externally reachable base URL of the CityQuest web app.

Widget templates link back into the web app (the adventure console, the
picture upload page), so every process needs one absolute base URL. The
value comes from, in order:

- an explicit client-side override passed by the caller
- an explicit base URL environment variable
- the local fallback when running in development mode
- the hosting provider's deployment hostname
- a generic host variable
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from urllib.parse import urlsplit

FALLBACK_BASE_URL = "http://localhost:3000/"
FALLBACK_ORIGIN = "http://localhost:3000"

EXPLICIT_URL_VARS = (
    "MCP_WIDGET_BASE_URL",
    "PUBLIC_BASE_URL",
    "VITE_PUBLIC_BASE_URL",
    "VITE_APP_BASE_URL",
)
MODE_VARS = ("NODE_ENV", "MODE", "VITE_NODE_ENV", "VITE_MODE", "APP_ENV", "ENVIRONMENT")
DEV_FLAG_VARS = ("DEV", "VITE_DEV")
GENERIC_URL_VARS = ("HOST", "URL")

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def _first(env: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def normalize_base_url(value: str | None) -> str:
    """Strip trailing slashes and append exactly one."""
    if not value:
        return FALLBACK_BASE_URL
    trimmed = value.rstrip("/")
    return f"{trimmed or FALLBACK_BASE_URL.rstrip('/')}/"


def is_development(env: Mapping[str, str]) -> bool:
    """Check the mode variables, then the boolean dev flags."""
    mode = _first(env, MODE_VARS)
    if mode and mode.lower() == "development":
        return True
    for name in DEV_FLAG_VARS:
        flag = env.get(name)
        if flag is not None:
            return flag.lower() == "true"
    return False


def _with_scheme(host: str | None) -> str | None:
    host = (host or "").rstrip("/")
    if not host:
        return None
    return host if _SCHEME_RE.match(host) else f"https://{host}"


def _hosting_provider_url(env: Mapping[str, str]) -> str | None:
    if env.get("VERCEL_ENV") == "production":
        host = env.get("VERCEL_PROJECT_PRODUCTION_URL")
    else:
        host = env.get("VERCEL_BRANCH_URL") or env.get("VERCEL_URL")
    return _with_scheme(host)


def resolve_base_url(
    env: Mapping[str, str] | None = None,
    client_base_url: str | None = None,
) -> str:
    """Return the app base URL, always ending in a single slash.

    Args:
        env: Environment mapping. Defaults to ``os.environ``.
        client_base_url: Override injected by a client context, wins over
            everything else when set.
    """
    if client_base_url:
        return normalize_base_url(client_base_url)

    if env is None:
        env = os.environ

    explicit = _first(env, EXPLICIT_URL_VARS)
    if explicit:
        return normalize_base_url(explicit)

    if is_development(env):
        return FALLBACK_BASE_URL

    hosted = _hosting_provider_url(env)
    if hosted:
        return normalize_base_url(hosted)

    return normalize_base_url(_with_scheme(_first(env, GENERIC_URL_VARS)))


def base_origin(base_url: str) -> str:
    """Return scheme://host[:port] of a base URL, for CSP domain lists."""
    try:
        parts = urlsplit(base_url)
    except ValueError:
        return FALLBACK_ORIGIN
    if not parts.scheme or not parts.netloc:
        return FALLBACK_ORIGIN
    return f"{parts.scheme}://{parts.netloc}"
