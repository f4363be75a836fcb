"""Managers for background persistence of finished collages."""

from .photo_writer import FileSystemPhotoWriter, PersistenceError, PhotoWriter, writer_metrics
from .save import Failed, SaveOrchestrator, SaveResult, Saved

__all__ = [
    "Failed",
    "FileSystemPhotoWriter",
    "PersistenceError",
    "PhotoWriter",
    "SaveOrchestrator",
    "SaveResult",
    "Saved",
    "writer_metrics",
]
