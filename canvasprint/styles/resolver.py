"""Resolve the CSS text currently applied to the page."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict

from ..config import DEVELOPMENT, PRODUCTION, current_mode
from ..errors import StyleRetrievalFailure
from ..view import LiveView
from .sources import InlineStyleSource, LinkedStyleSource, StyleSource

logger = logging.getLogger(__name__)


def _default_sources() -> Dict[str, StyleSource]:
    return {DEVELOPMENT: InlineStyleSource(), PRODUCTION: LinkedStyleSource()}


@dataclass
class StyleResolver:
    """Select a :class:`StyleSource` per call and shield callers from its failures.

    ``mode`` is invoked on every :meth:`resolve` call, so switching between a
    live-reload session and a packaged build never requires a new resolver.
    """

    sources: Dict[str, StyleSource] = field(default_factory=_default_sources)
    mode: Callable[[], str] = current_mode

    def source_for(self, mode: str) -> StyleSource:
        if mode not in self.sources:
            raise KeyError(f"No style source registered for mode '{mode}'")
        return self.sources[mode]

    async def resolve(self, view: LiveView) -> str:
        """Return the page's current CSS text, or ``""`` when it is unavailable."""

        mode = self.mode()
        source = self.source_for(mode)
        try:
            return await source.read(view)
        except StyleRetrievalFailure as exc:
            logger.warning("Exporting without styles (%s mode): %s", mode, exc)
            return ""


__all__ = ["StyleResolver"]
