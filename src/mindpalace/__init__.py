"""MindPalace: turn study material into memory palace aids."""

from .errors import (
    DecodeError,
    ImageGenerationError,
    InvalidImageError,
    MindPalaceError,
    NetworkError,
    RequestConstructionError,
)
from .models import ArchivedEntry, MemoryPoint, Method, PalaceResult

__version__ = "0.1.0"

__all__ = [
    "ArchivedEntry",
    "DecodeError",
    "ImageGenerationError",
    "InvalidImageError",
    "MemoryPoint",
    "Method",
    "MindPalaceError",
    "NetworkError",
    "PalaceResult",
    "RequestConstructionError",
]
