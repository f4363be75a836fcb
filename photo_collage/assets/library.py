"""Asset libraries the picker selects images from.

A library lists the assets it can serve and answers image requests.  A
request may yield one or more degraded intermediate images before the final
one, the way photo libraries deliver a quick placeholder while the full
rendition is still decoding.  Requests run on pool threads.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Protocol, Tuple, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from .. import config
from ..utils.validation import normalize_extensions, validate_directory, validate_image_path

logger = logging.getLogger("photo_collage.assets.library")


class AssetRetrievalError(RuntimeError):
    """Raised when an asset cannot be found or decoded."""


@dataclass(frozen=True, slots=True)
class AssetRecord:
    asset_id: str
    path: Path
    created: float


@dataclass(frozen=True, slots=True)
class AssetImage:
    image: Image.Image
    degraded: bool = False


class AssetLibrary(Protocol):
    def list_assets(self) -> List[AssetRecord]:
        ...

    def request_image(self, asset_id: str, target_size: Tuple[int, int]) -> Iterable[AssetImage]:
        ...


class DirectoryAssetLibrary:
    """Serve the images stored directly inside one directory.

    Asset identifiers are file names.  Each request yields a small degraded
    rendition first (unless ``deliver_degraded`` is off) and then the image
    scaled down to fit the requested size.
    """

    def __init__(
        self,
        root: Union[str, Path],
        *,
        deliver_degraded: bool = True,
        degraded_size: Tuple[int, int] = config.DEGRADED_PREVIEW_SIZE,
    ) -> None:
        self.root = validate_directory(root)
        self.deliver_degraded = deliver_degraded
        self.degraded_size = degraded_size
        self._extensions = normalize_extensions(config.SUPPORTED_IMAGE_FORMATS)

    def list_assets(self) -> List[AssetRecord]:
        """Return the supported images in the directory, oldest first."""
        records = [
            AssetRecord(asset_id=entry.name, path=entry, created=os.path.getctime(entry))
            for entry in self.root.iterdir()
            if entry.is_file() and entry.suffix.lower() in self._extensions
        ]
        records.sort(key=lambda record: (record.created, record.asset_id))
        return records

    def request_image(self, asset_id: str, target_size: Tuple[int, int]) -> Iterator[AssetImage]:
        path = self._resolve(asset_id)
        try:
            with Image.open(path) as img:
                # Let JPEG decoders downscale while reading
                img.draft(img.mode, target_size)
                image = ImageOps.exif_transpose(img)
                image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise AssetRetrievalError(f"Could not decode asset {asset_id}: {exc}") from exc
        logger.debug("Decoded %s at %dx%d", asset_id, image.width, image.height)

        if self.deliver_degraded:
            degraded = image.copy()
            degraded.thumbnail(self.degraded_size, Image.Resampling.NEAREST)
            yield AssetImage(degraded, degraded=True)

        final = image.copy()
        final.thumbnail(target_size, Image.Resampling.LANCZOS)
        yield AssetImage(final)

    def _resolve(self, asset_id: str) -> Path:
        try:
            path = validate_image_path(self.root / asset_id, self._extensions)
        except ValueError as exc:
            raise AssetRetrievalError(f"Unknown asset {asset_id}: {exc}") from exc
        if path.parent != self.root:
            raise AssetRetrievalError(f"Asset {asset_id} is outside the library")
        return path
