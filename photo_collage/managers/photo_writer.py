# managers/photo_writer.py
"""Photo writers used to persist finished collages.

A writer exposes a single blocking ``write(image) -> str`` call that returns
the identifier of the stored photo and raises on failure.  The save
orchestrator runs it on a pool thread, so implementations must not touch Qt
objects.

:class:`FileSystemPhotoWriter` stores collages as image files named after a
generated identifier.  Each write emits structured logs carrying a
correlation identifier (``cid``) and records success/failure counts and
durations in ``writer_metrics``.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from PIL import Image

from .. import config
from ..utils.validation import validate_directory


class PersistenceError(RuntimeError):
    """Raised when a collage could not be stored."""


class PhotoWriter(Protocol):
    def write(self, image: Image.Image) -> str:
        ...


class _WriterMetrics:
    """Simple in-memory metrics collector."""

    def __init__(self) -> None:
        self.counters: Counter[str] = Counter()
        self.durations: list[float] = []

    def record(self, name: str, duration: float | None = None) -> None:
        self.counters[name] += 1
        if duration is not None:
            self.durations.append(duration)

    def reset(self) -> None:
        self.counters.clear()
        self.durations.clear()


writer_metrics = _WriterMetrics()


class FileSystemPhotoWriter:
    """Save collages into a directory as ``<id>.<ext>`` files."""

    EXTENSIONS = {"PNG": ".png", "JPEG": ".jpg"}

    def __init__(
        self,
        directory: Union[str, Path] = config.SAVED_PHOTOS_PATH,
        *,
        image_format: str = config.SAVE_FORMAT,
        quality: int = config.QUALITY_DEFAULT,
    ) -> None:
        fmt = image_format.upper()
        if fmt == "JPG":
            fmt = "JPEG"
        if fmt not in self.EXTENSIONS:
            raise ValueError(f"Unsupported save format: {image_format}")
        self.directory = Path(directory)
        self.image_format = fmt
        self.quality = quality

    def write(self, image: Image.Image) -> str:
        photo_id = uuid.uuid4().hex
        log = logging.LoggerAdapter(logging.getLogger(__name__), {"cid": photo_id})
        start = time.perf_counter()
        try:
            target_dir = validate_directory(self.directory, create=True)
            path = target_dir / f"{photo_id}{self.EXTENSIONS[self.image_format]}"
            self._save_image(image, path)
        except (OSError, ValueError) as exc:
            writer_metrics.record("failure")
            log.error(
                "photo write failed",
                extra={"directory": str(self.directory), "error": str(exc)},
            )
            raise PersistenceError(f"Could not save photo: {exc}") from exc

        duration = (time.perf_counter() - start) * 1000
        writer_metrics.record("success", duration)
        log.info("photo written", extra={"path": str(path), "duration_ms": duration})
        return photo_id

    def _save_image(self, image: Image.Image, path: Path) -> None:
        """Save an image with optimal settings."""
        save_params: Dict[str, Any] = {"format": self.image_format}
        if self.image_format == "JPEG":
            image = image.convert("RGB")
            save_params.update({
                "quality": self.quality,
                "optimize": True,
                "progressive": True,
            })
        else:
            save_params.update({
                "optimize": True,
                "compress_level": 6,
            })
        image.save(str(path), **save_params)

    def path_for(self, photo_id: str) -> Optional[Path]:
        """Return the stored file for *photo_id*, if it exists."""
        path = self.directory / f"{photo_id}{self.EXTENSIONS[self.image_format]}"
        return path if path.is_file() else None
