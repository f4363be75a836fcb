"""Utility package for photo collage."""

from . import collage_layouts, validation

__all__ = ["collage_layouts", "validation"]
