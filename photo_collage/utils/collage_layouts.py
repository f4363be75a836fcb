from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from PIL import Image, ImageOps

logger = logging.getLogger("photo_collage.layouts")


@dataclass(slots=True)
class StripLayout:
    """Side-by-side layout of equal-width strips spanning the whole canvas."""

    count: int
    spacing: int = 0

    def __post_init__(self) -> None:
        if self.count <= 0:
            raise ValueError("Strip count must be a positive integer")
        if self.spacing < 0:
            raise ValueError("Spacing must be non-negative")

    def get_cell_dimensions(self, canvas_width: int, canvas_height: int) -> List[Dict[str, int]]:
        """
        Calculate the box of each strip on the canvas.

        The last strip absorbs the remainder of the integer division so the
        strips always cover the full width.

        Args:
            canvas_width (int): Width of the canvas
            canvas_height (int): Height of the canvas

        Returns:
            List[Dict[str, int]]: One ``x/y/width/height`` mapping per strip
        """
        total_spacing = self.spacing * (self.count - 1)
        available_width = max(self.count, canvas_width - total_spacing)
        strip_width = available_width // self.count

        dimensions = []
        for index in range(self.count):
            x = index * (strip_width + self.spacing)
            width = strip_width
            if index == self.count - 1:
                width = max(1, canvas_width - x)
            dimensions.append({
                "x": x,
                "y": 0,
                "width": width,
                "height": canvas_height,
            })
        return dimensions


def _validate_size(size: Tuple[int, int]) -> Tuple[int, int]:
    width, height = (int(size[0]), int(size[1]))
    if width <= 0 or height <= 0:
        raise ValueError(f"Collage size must be positive, got {size!r}")
    return width, height


def compose_collage(
    images: Sequence[Image.Image],
    size: Tuple[int, int],
    *,
    spacing: int = 0,
    background: str = "white",
) -> Optional[Image.Image]:
    """Compose *images* side by side into a single ``size`` image.

    Each image is scaled to cover its strip and centre-cropped, preserving
    its aspect ratio.  Returns ``None`` for an empty sequence.
    """
    if not images:
        return None

    width, height = _validate_size(size)
    layout = StripLayout(len(images), spacing=spacing)
    canvas = Image.new("RGB", (width, height), background)
    for image, cell in zip(images, layout.get_cell_dimensions(width, height)):
        tile = ImageOps.fit(
            image.convert("RGB"),
            (cell["width"], cell["height"]),
            Image.Resampling.LANCZOS,
        )
        canvas.paste(tile, (cell["x"], cell["y"]))
    logger.debug("Composed collage of %d image(s) at %dx%d", len(images), width, height)
    return canvas


__all__ = ["StripLayout", "compose_collage"]
