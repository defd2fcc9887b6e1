"""
Off-screen compositor for the merged canvas.

Draws each image's crop-selected region into its pane, the pane borders
and the crop overlay onto a single Pillow canvas. The interactive window
and batch output both present this canvas, so what is written to disk is
exactly what the user saw minus the overlay.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from image_merge.constants import (
    BORDER_COLORS,
    BORDER_NONE,
    CANVAS_BACKGROUND,
    COLOR_BLACK,
    COLOR_MODE_RGB,
    CROP_OVERLAY_WIDTH,
    PANE_BORDER_WIDTH,
)
from image_merge.crop import overlay_rect

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from image_merge.crop import CropRect
    from image_merge.geometry import Rect
    from image_merge.image_io import SourceImage
    from image_merge.layout import Pane, PanePlan
    from image_merge.type_defs import RGB, Size


@dataclass(frozen=True)
class BorderStyle:
    """Border color selection; ``color`` is None when borders are off."""

    name: str
    color: RGB | None
    width: int = PANE_BORDER_WIDTH

    @property
    def enabled(self) -> bool:
        """Return True when pane borders are drawn."""
        return self.color is not None

    def target(self, pane: Pane) -> Rect:
        """Return the rectangle images are drawn into for ``pane``."""
        return pane.content if self.enabled else pane.full


def parse_border(text: str) -> BorderStyle:
    """
    Resolve a palette name (case-insensitive) or ``NONE``.

    The name is kept as typed so reconstruction command lines echo it.

    Raises:
        ValueError: If the name is not in the palette.

    """
    key = text.strip().upper()
    if key == BORDER_NONE:
        return BorderStyle(name=text, color=None)
    try:
        return BorderStyle(name=text, color=BORDER_COLORS[key])
    except KeyError as exc:
        choices = ", ".join([BORDER_NONE, *BORDER_COLORS])
        msg = f"unknown border color '{text}', choices are {choices}"
        raise ValueError(msg) from exc


@dataclass(frozen=True)
class Overlay:
    """Pending crop drawn over the pane of image ``index``."""

    index: int
    crop: CropRect


def render_tile(image: SourceImage, dest: Rect) -> Image.Image:
    """
    Return the image's cropped region scaled to ``dest``.

    Reuses the slot's cached render when it still matches the pane size;
    otherwise renders afresh and stores the result in the cache.
    """
    cached = image.cached_render
    if cached is not None and cached.size == dest.size():
        return cached
    tile = image.crop_region().resize(
        dest.size(), Image.Resampling.BILINEAR,
    )
    image.cached_render = tile
    return tile


def draw_border(
    draw: ImageDraw.ImageDraw,
    rect: Rect,
    color: RGB,
    width: int,
) -> None:
    """Outline ``rect`` with a ``width`` pixel band."""
    if rect.is_empty():
        return
    draw.rectangle(
        (rect.x, rect.y, rect.x1 - 1, rect.y1 - 1),
        outline=color,
        width=width,
    )


def draw_overlay(
    draw: ImageDraw.ImageDraw,
    dest: Rect,
    crop: CropRect,
) -> None:
    """Draw the pending crop inside ``dest`` in pane-local coordinates."""
    x, y, w, h = overlay_rect(dest.w, dest.h, crop)
    if w <= 0 or h <= 0:
        return
    left = dest.x + x
    top = dest.y + y
    draw.rectangle(
        (left, top, left + w - 1, top + h - 1),
        outline=COLOR_BLACK,
        width=CROP_OVERLAY_WIDTH,
    )


def compose_frame(
    images: Sequence[SourceImage],
    plan: PanePlan,
    canvas_size: Size,
    border: BorderStyle,
    overlay: Overlay | None = None,
) -> Image.Image:
    """
    Render one frame of the merged canvas.

    Panes beyond the image count and empty slots stay background. Borders
    are drawn for every image slot, loaded or not.
    """
    canvas = Image.new(COLOR_MODE_RGB, canvas_size, CANVAS_BACKGROUND)
    draw = ImageDraw.Draw(canvas)

    for idx, (image, pane) in enumerate(zip(images, plan.panes, strict=False)):
        dest = border.target(pane)
        if image.loaded and not dest.is_empty():
            canvas.paste(render_tile(image, dest), (dest.x, dest.y))
        if border.color is not None:
            draw_border(draw, pane.full, border.color, border.width)
        if overlay is not None and overlay.index == idx:
            draw_overlay(draw, dest, overlay.crop)

    return canvas


def invalidate_all(images: Sequence[SourceImage]) -> None:
    """Drop every cached render."""
    for image in images:
        image.invalidate_cache()
