"""Snapshot serialization for the export pipeline."""

from .serializer import (
    SVG_NS,
    XML_DECLARATION,
    build_snapshot,
    clone_graphic,
    serialize,
    take_snapshot,
)

__all__ = ["SVG_NS", "XML_DECLARATION", "build_snapshot", "clone_graphic", "serialize", "take_snapshot"]
