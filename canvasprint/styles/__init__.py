"""Style resolution for the export pipeline."""

from .resolver import StyleResolver
from .sources import InlineStyleSource, LinkedStyleSource, StyleSource

__all__ = ["InlineStyleSource", "LinkedStyleSource", "StyleResolver", "StyleSource"]
