"""Selection state: the bounded gate and the working set store."""

from .gate import BoundedSelectionGate, SelectionSource
from .store import WorkingSet, WorkingSetStore

__all__ = [
    "BoundedSelectionGate",
    "SelectionSource",
    "WorkingSet",
    "WorkingSetStore",
]
