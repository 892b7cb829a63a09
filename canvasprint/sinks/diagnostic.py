"""Sink that writes the export document to the log."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

DIAGNOSTIC_LOGGER = "canvasprint.diagnostic"


@dataclass
class DiagnosticSink:
    """Emit each document on a logger for inspection; no file is produced."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(DIAGNOSTIC_LOGGER))
    level: int = logging.INFO
    standalone: bool = False

    def deliver(self, document: str) -> None:
        self.logger.log(self.level, "%s", document)
