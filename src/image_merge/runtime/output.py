"""Helpers for validating output paths and writing the merged image."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from image_merge.constants import JPEG_QUALITY, OUTPUT_FORMATS
from image_merge.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from PIL import Image

    from image_merge.type_defs import Size


def validate_output_filename(name: str) -> str:
    """
    Ensure ``name`` has a supported ``.jpg`` or ``.png`` extension.

    The extension selects the encoder, so it is matched exactly and the
    name must contain something besides the extension.

    Raises:
        ValueError: If the extension is missing or unsupported.

    """
    suffix = name[-4:]
    if len(name) <= len(suffix) or suffix not in OUTPUT_FORMATS:
        msg = "output filename must have a .jpg or .png extension"
        raise ValueError(msg)
    return name


def write_output(
    canvas: Image.Image,
    used_size: Size,
    out_path: str | Path,
) -> Path:
    """
    Save the used area of ``canvas`` to ``out_path``.

    Only the top left ``used_size`` region is written; canvas pixels left
    over by the integer cell division are dropped.
    """
    path = Path(out_path)
    image_format = OUTPUT_FORMATS[validate_output_filename(str(path))[-4:]]
    used_w, used_h = used_size
    logger.info("Writing %s, width=%d height=%d", path, used_w, used_h)

    if path.parent != Path():
        path.parent.mkdir(parents=True, exist_ok=True)

    region = canvas.crop((0, 0, used_w, used_h))
    if image_format == "JPEG":
        region.save(path, format=image_format, quality=JPEG_QUALITY)
    else:
        region.save(path, format=image_format)
    return path
