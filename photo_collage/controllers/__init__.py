"""Controller layer coordinating selection, preview and save."""

from .session import CollageSessionController

__all__ = [
    "CollageSessionController",
]
