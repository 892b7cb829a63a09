"""Exception hierarchy shared by the export pipeline."""
from __future__ import annotations


class CanvasPrintError(Exception):
    """Base class for every error raised by :mod:`canvasprint`."""


class StyleRetrievalFailure(CanvasPrintError):
    """The linked stylesheet could not be located or fetched.

    Only raised by style sources. :class:`~canvasprint.styles.StyleResolver`
    recovers from it by exporting with an empty style block.
    """


class CaptureError(CanvasPrintError):
    """The graphic could not be captured as a well-formed document."""


__all__ = ["CanvasPrintError", "CaptureError", "StyleRetrievalFailure"]
