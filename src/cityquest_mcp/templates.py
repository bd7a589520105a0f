"""HTML template suppliers for the CityQuest widgets.

A supplier is an async callable returning widget markup. The registry
awaits each supplier exactly once at startup.
"""

from __future__ import annotations

import logging
from html import escape
from pathlib import Path
from string import Template

import httpx

logger = logging.getLogger(__name__)

WIDGET_DIR = Path(__file__).resolve().parent / "widgets"
DEFAULT_FETCH_TIMEOUT = 10.0


def load_widget_html(filename: str) -> str:
    """Read a bundled widget template."""
    return (WIDGET_DIR / filename).read_text(encoding="utf-8")


class BundledTemplate:
    """Markup shipped with the package, with optional ``${name}`` substitutions.

    Substituted values are HTML-escaped, quotes included.
    """

    def __init__(self, filename: str, **substitutions: str) -> None:
        self.filename = filename
        self.substitutions = substitutions

    async def __call__(self) -> str:
        html = load_widget_html(self.filename)
        if self.substitutions:
            html = Template(html).substitute(
                {k: escape(v, quote=True) for k, v in self.substitutions.items()}
            )
        return html

    def __repr__(self) -> str:
        return f"BundledTemplate({self.filename!r})"


class RemotePageTemplate:
    """Markup rendered by the CityQuest web app and fetched over HTTP."""

    def __init__(
        self,
        page_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        """Initialize the supplier.

        Args:
            page_url: Absolute URL of the page to embed.
            client: Shared HTTP client. A short-lived one is opened if None.
            timeout: Request timeout in seconds.
        """
        self.page_url = page_url
        self.timeout = timeout
        self._client = client

    async def __call__(self) -> str:
        logger.info(f"Fetching widget markup from {self.page_url}")
        if self._client is not None:
            response = await self._client.get(self.page_url, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.page_url)
        response.raise_for_status()
        return response.text

    def __repr__(self) -> str:
        return f"RemotePageTemplate({self.page_url!r})"
