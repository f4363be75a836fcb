"""Asset library access for the photo picker."""

from .facade import AssetRetrievalFacade
from .library import (
    AssetImage,
    AssetLibrary,
    AssetRecord,
    AssetRetrievalError,
    DirectoryAssetLibrary,
)

__all__ = [
    "AssetImage",
    "AssetLibrary",
    "AssetRecord",
    "AssetRetrievalError",
    "AssetRetrievalFacade",
    "DirectoryAssetLibrary",
]
