"""Photo Collage: pick up to six photos, preview them as a strip and save it."""

from .composer import CollageComposer, CollageSnapshot
from .controllers import CollageSessionController
from .managers import Failed, FileSystemPhotoWriter, PersistenceError, SaveOrchestrator, Saved
from .state import BoundedSelectionGate, SelectionSource, WorkingSetStore

__all__ = [
    "BoundedSelectionGate",
    "CollageComposer",
    "CollageSessionController",
    "CollageSnapshot",
    "Failed",
    "FileSystemPhotoWriter",
    "PersistenceError",
    "SaveOrchestrator",
    "Saved",
    "SelectionSource",
    "WorkingSetStore",
]

__version__ = "0.1.0"
