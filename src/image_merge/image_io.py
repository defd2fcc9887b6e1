"""Image loading and crop region extraction."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image
from tqdm import tqdm

from image_merge.config_defaults import DEFAULT_MAX_IMAGE_DIM
from image_merge.constants import COLOR_MODE_RGB, LOAD_PROGRESS_MIN_IMAGES
from image_merge.crop import FULL_CROP, CropRect, to_pixel_box
from image_merge.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence


@dataclass(eq=False)
class SourceImage:
    """
    One input picture and its per-slot state.

    ``pixels`` is an ``(height, width, 3)`` uint8 array marked read-only.
    A slot whose file failed to decode keeps ``width == height == 0`` and
    ``pixels is None``; it still occupies its index so ``-k`` addressing and
    selection order stay stable.
    """

    path: str
    pixels: np.ndarray | None = None
    width: int = 0
    height: int = 0
    crop: CropRect = FULL_CROP
    cached_render: Image.Image | None = field(default=None, repr=False)

    @property
    def loaded(self) -> bool:
        """Return True when the slot holds decoded pixels."""
        return self.pixels is not None and self.width > 0

    def invalidate_cache(self) -> None:
        """Drop the cached render for this slot."""
        self.cached_render = None

    def crop_region(self) -> Image.Image:
        """
        Return the crop-selected sub-image as a new Pillow image.

        Raises:
            ValueError: If the slot holds no pixels.

        """
        if self.pixels is None or self.width == 0:
            msg = f"Image slot for '{self.path}' is empty"
            raise ValueError(msg)
        left, top, crop_w, crop_h = to_pixel_box(
            self.crop, self.width, self.height,
        )
        region = self.pixels[top:top + crop_h, left:left + crop_w]
        return Image.fromarray(np.ascontiguousarray(region))


def load_image(path: str) -> Image.Image:
    """
    Load an image from a file path and convert to RGB.

    Args:
        path: Path to the image file

    Returns:
        PIL Image in RGB mode

    Raises:
        FileNotFoundError: If the image file does not exist
        IOError: If the image cannot be opened or processed, including
            images over Pillow's decompression bomb limit

    """
    try:
        with Image.open(path) as img:
            return img.convert(COLOR_MODE_RGB)
    except FileNotFoundError as e:
        msg = f"Image file not found: '{path}'"
        raise FileNotFoundError(msg) from e
    except (OSError, Image.DecompressionBombError) as e:
        msg = f"Error loading image '{path}': {e!s}"
        raise OSError(msg) from e


def limit_dimensions(img: Image.Image, max_dim: int) -> Image.Image:
    """Downscale ``img`` so neither side exceeds ``max_dim``."""
    if img.width <= max_dim and img.height <= max_dim:
        return img
    original = img.size
    img = img.copy()
    img.thumbnail((max_dim, max_dim), Image.Resampling.LANCZOS)
    logger.warning(
        "Image is large: %dx%d. Downscaled to %dx%d.",
        original[0], original[1], img.width, img.height,
    )
    return img


def decode_image(
    path: str,
    max_dim: int = DEFAULT_MAX_IMAGE_DIM,
) -> SourceImage:
    """
    Decode ``path`` into a :class:`SourceImage`.

    Load failures are logged and produce an empty slot instead of raising,
    so one bad file does not abort the whole composite.
    """
    try:
        img = load_image(path)
    except OSError as exc:
        # FileNotFoundError is an OSError too
        logger.warning("%s", exc)
        return SourceImage(path=path)

    img = limit_dimensions(img, max_dim)
    pixels = np.asarray(img, dtype=np.uint8).copy()
    pixels.flags.writeable = False
    logger.info("Read image file %s  %dx%d", path, img.width, img.height)
    return SourceImage(
        path=path, pixels=pixels, width=img.width, height=img.height,
    )


def load_images(
    paths: Sequence[str],
    max_dim: int = DEFAULT_MAX_IMAGE_DIM,
) -> list[SourceImage]:
    """Decode every path in order; failed files yield empty slots."""
    show_progress = len(paths) >= LOAD_PROGRESS_MIN_IMAGES
    return [
        decode_image(p, max_dim)
        for p in tqdm(paths, desc="Loading images", unit="img",
                      disable=not show_progress)
    ]
