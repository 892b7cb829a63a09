"""canvasprint package initialization.

This module exposes the primary entry points used by host applications to
export their live SVG canvas as a standalone document.
"""

from .api import ExportPipeline, create_pipeline
from .errors import CanvasPrintError, CaptureError, StyleRetrievalFailure

__all__ = [
    "CanvasPrintError",
    "CaptureError",
    "ExportPipeline",
    "StyleRetrievalFailure",
    "create_pipeline",
]
