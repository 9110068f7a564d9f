"""Window and stream object model."""

from .registry import ObjectRegistry
from .stream import Stream, StreamKind, to_units, units_to_text
from .window import Window

__all__ = [
    "ObjectRegistry",
    "Stream",
    "StreamKind",
    "Window",
    "to_units",
    "units_to_text",
]
