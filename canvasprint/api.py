"""Public API surface for canvasprint."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from canvasprint.config import DEVELOPMENT, PRODUCTION, ExportSettings
from canvasprint.errors import CaptureError
from canvasprint.obs.events import LOG_PORT, PRINT_PORT, PortBus
from canvasprint.sinks import DiagnosticSink, DownloadSink, FileDownloader, SinkRegistry
from canvasprint.sinks.registry import DeliverySink
from canvasprint.snapshot import build_snapshot
from canvasprint.styles import InlineStyleSource, LinkedStyleSource, StyleResolver
from canvasprint.view import LiveView

LOGGER = logging.getLogger(__name__)
CONSOLE_LOGGER = "canvasprint.console"


@dataclass
class ExportPipeline:
    """Container wiring the live view, style resolver and sinks together."""

    view: LiveView
    settings: ExportSettings = field(default_factory=ExportSettings.from_env)
    resolver: StyleResolver | None = None
    sinks: SinkRegistry = field(default_factory=SinkRegistry)
    bus: PortBus = field(default_factory=PortBus)
    console: logging.Logger = field(default_factory=lambda: logging.getLogger(CONSOLE_LOGGER))

    def __post_init__(self) -> None:
        self.style_resolver: StyleResolver = (
            self.resolver if self.resolver is not None else self._default_resolver()
        )
        self._register_default_sinks()
        self._gate = asyncio.Lock() if self.settings.single_flight else None
        self._connected = False

    def _default_resolver(self) -> StyleResolver:
        return StyleResolver(
            sources={
                DEVELOPMENT: InlineStyleSource(),
                PRODUCTION: LinkedStyleSource(
                    base_url=self.settings.base_url,
                    timeout=self.settings.fetch_timeout,
                ),
            }
        )

    def _register_default_sinks(self) -> None:
        if "download" not in self.sinks.registry:
            self.sinks.register(
                "download",
                DownloadSink(
                    view=self.view,
                    downloader=FileDownloader(self.settings.output_dir),
                    filename=self.settings.filename,
                ),
            )
        if "diagnostic" not in self.sinks.registry:
            self.sinks.register("diagnostic", DiagnosticSink())

    def connect(self) -> None:
        """Subscribe to the ``print`` and ``log`` ports.

        Subscriptions last for the lifetime of the bus; calling this twice is
        a no-op so a notification never triggers two exports.
        """

        if self._connected:
            return
        self.bus.subscribe(PRINT_PORT, self._on_print)
        self.bus.subscribe(LOG_PORT, self._on_log)
        self._connected = True

    @property
    def sink(self) -> DeliverySink:
        return self.sinks.get(self.settings.sink)

    async def export(self, payload: Any = None) -> str:
        """Run one export and return the delivered document.

        ``payload`` is accepted for parity with port notifications and is not
        inspected.  Raises :class:`CaptureError` when the graphic cannot be
        captured; the sink is not invoked in that case.
        """

        if self._gate is None:
            return await self._export_once()
        async with self._gate:
            return await self._export_once()

    async def _export_once(self) -> str:
        sink = self.sink
        styles = await self.style_resolver.resolve(self.view)
        locator = self.settings.locator
        matches = self.view.count_by_id(locator)
        if matches > 1:
            LOGGER.warning("Locator '%s' matched %d elements; exporting the first", locator, matches)
        graphic = self.view.find_by_id(locator)
        if graphic is None:
            raise CaptureError(f"No element with id '{locator}' in the page")
        return build_snapshot(graphic, styles, sink, declaration=self.settings.declaration)

    async def _on_print(self, payload: Any) -> Optional[str]:
        try:
            return await self.export(payload)
        except (CaptureError, OSError, KeyError):
            LOGGER.exception("Export aborted")
            return None

    def _on_log(self, payload: Any) -> None:
        self.console.info("%s", payload)


def create_pipeline(view: LiveView, settings: ExportSettings | None = None) -> ExportPipeline:
    """Build an :class:`ExportPipeline` for ``view`` and subscribe it to its ports."""

    pipeline = ExportPipeline(view=view, settings=settings or ExportSettings.from_env())
    pipeline.connect()
    return pipeline


__all__ = ["CONSOLE_LOGGER", "ExportPipeline", "create_pipeline"]
