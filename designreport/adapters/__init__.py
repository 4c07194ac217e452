"""Extraction adapters, one per design source format."""

from .base import ExtractionAdapter, ExtractionError
from .figma import FigmaAdapter, FigmaAPIError, FigmaClient
from .sketch import SketchAdapter

__all__ = [
    "ExtractionAdapter",
    "ExtractionError",
    "FigmaAdapter",
    "FigmaAPIError",
    "FigmaClient",
    "SketchAdapter",
]
