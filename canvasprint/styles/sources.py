"""Style sources for the two ways a build delivers its stylesheet."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import urljoin

import httpx

from ..errors import StyleRetrievalFailure
from ..view import LiveView

logger = logging.getLogger(__name__)


class StyleSource(Protocol):
    """Protocol for objects able to produce the page's current CSS text."""

    async def read(self, view: LiveView) -> str:
        """Return the CSS text governing ``view``."""


@dataclass
class InlineStyleSource:
    """Development builds inject their CSS into a ``<style>`` node."""

    async def read(self, view: LiveView) -> str:
        node = view.first_style()
        if node is None:
            logger.debug("No inline <style> node found in the page")
            return ""
        return "".join(node.itertext())


@dataclass
class LinkedStyleSource:
    """Production builds reference their CSS through ``<link rel="stylesheet">``.

    ``client`` is optional; when omitted a short-lived
    :class:`httpx.AsyncClient` is opened for the single request.
    """

    base_url: Optional[str] = None
    client: Optional[httpx.AsyncClient] = None
    timeout: Optional[float] = None

    def stylesheet_url(self, view: LiveView) -> str:
        """Return the absolute URL of the page's linked stylesheet."""

        link = view.first_stylesheet_link()
        if link is None:
            raise StyleRetrievalFailure("No <link rel=\"stylesheet\"> in the page")
        href = (link.get("href") or "").strip()
        if not href:
            raise StyleRetrievalFailure("Stylesheet link has no href")
        return urljoin(self.base_url, href) if self.base_url else href

    async def read(self, view: LiveView) -> str:
        url = self.stylesheet_url(view)
        if self.client is not None:
            return await self._fetch(self.client, url)
        client_configs = {} if self.timeout is None else {"timeout": self.timeout}
        async with httpx.AsyncClient(**client_configs) as client:
            return await self._fetch(client, url)

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> str:
        logger.debug("Fetching stylesheet %s", url)
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StyleRetrievalFailure(f"Could not fetch stylesheet {url}: {exc}") from exc
        return response.text


__all__ = ["InlineStyleSource", "LinkedStyleSource", "StyleSource"]
