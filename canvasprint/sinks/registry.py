"""Name based lookup of delivery sinks."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Protocol


class DeliverySink(Protocol):
    """Protocol representing a destination for a finished export document."""

    standalone: bool

    def deliver(self, document: str) -> None:  # pragma: no cover - interface
        ...


@dataclass
class SinkRegistry:
    """Map configuration names such as ``download`` to sink instances."""

    registry: Dict[str, DeliverySink] = field(default_factory=dict)

    def register(self, name: str, sink: DeliverySink) -> None:
        """Register ``sink`` under ``name``."""

        self.registry[name] = sink

    def get(self, name: str) -> DeliverySink:
        """Return the sink registered under ``name``."""

        if name not in self.registry:
            raise KeyError(f"Unknown sink: {name}")
        return self.registry[name]
