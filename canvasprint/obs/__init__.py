"""Observation primitives for the host notification ports."""

from .events import Event, PortBus

__all__ = ["Event", "PortBus"]
