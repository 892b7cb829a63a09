"""Sink that offers the export document as a file download.

The page gets a transient anchor carrying the document as a ``data:`` URI;
the anchor is clicked and removed again, mirroring how a browser triggers a
download without navigating away from the live view.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable
from urllib.parse import quote, unquote

from ..view import LiveView

logger = logging.getLogger(__name__)

MEDIA_TYPE = "image/svg+xml"
DATA_URI_PREFIX = f"data:{MEDIA_TYPE};charset=utf-8,"
DEFAULT_FILENAME = "drawing.svg"

Downloader = Callable[[str, str], None]


def to_data_uri(document: str) -> str:
    """Return ``document`` as a percent-encoded UTF-8 SVG data URI."""

    return DATA_URI_PREFIX + quote(document, safe="")


def from_data_uri(uri: str) -> str:
    """Decode a URI produced by :func:`to_data_uri`."""

    if not uri.startswith(DATA_URI_PREFIX):
        raise ValueError(f"Not a {MEDIA_TYPE} data URI")
    return unquote(uri[len(DATA_URI_PREFIX):], encoding="utf-8")


@dataclass
class FileDownloader:
    """Default click handler: save the anchor's payload under ``directory``."""

    directory: Path = Path(".")

    def __call__(self, filename: str, href: str) -> None:
        target = Path(self.directory) / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", newline="") as handle:
            handle.write(from_data_uri(href))
        logger.info("Saved export to %s", target)


@dataclass
class DownloadSink:
    """Trigger a download through a transient anchor attached to ``view``."""

    view: LiveView
    downloader: Downloader = field(default_factory=FileDownloader)
    filename: str = DEFAULT_FILENAME
    standalone: bool = True

    def deliver(self, document: str) -> None:
        href = to_data_uri(document)
        anchor = self.view.attach_transient("a", {"href": href, "download": self.filename})
        try:
            self._click(anchor)
        finally:
            self.view.detach(anchor)

    def _click(self, anchor) -> None:
        self.downloader(anchor.get("download"), anchor.get("href"))
