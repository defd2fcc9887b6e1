"""
Crop transform model.

Every image carries a persistent :class:`CropRect` expressed in percent of
the *original* image. While the user edits, a single transient pending
rectangle lives in :class:`CropEditor`; it is expressed in percent of the
image as currently displayed (already cropped) and is folded into the
persistent crop by :func:`compose` on commit. Because composition always
re-expresses the result relative to the original image, repeated crops
zoom in progressively without compounding rounding against displayed
pixels.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from image_merge.constants import (
    CROP_FULL,
    CROP_INITIAL_SIZE,
    CROP_MIN_EDIT_SIZE,
    CROP_MIN_PRESET_SIZE,
    CROP_SANITIZE_EDGE_MAX,
    CROP_SANITIZE_ORIGIN_MAX,
    CROP_STEP,
    MAX_IMAGE,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

_PRESET_FIELDS = 5


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in percent: origin ``x, y`` and size ``w, h``."""

    x: float = 0.0
    y: float = 0.0
    w: float = CROP_FULL
    h: float = CROP_FULL

    def is_full(self) -> bool:
        """Return True for the exact full-image default."""
        return self == FULL_CROP

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return ``(x, y, w, h)``."""
        return self.x, self.y, self.w, self.h


FULL_CROP = CropRect()
INITIAL_PENDING_CROP = CropRect(
    x=(CROP_FULL - CROP_INITIAL_SIZE) / 2,
    y=(CROP_FULL - CROP_INITIAL_SIZE) / 2,
    w=CROP_INITIAL_SIZE,
    h=CROP_INITIAL_SIZE,
)


def validate_preset(crop: CropRect) -> CropRect:
    """
    Check a user supplied crop against the strict preset rules.

    Raises:
        ValueError: If a value is not finite, the origin is negative, a
            side is below the minimum viable crop, or the rectangle leaves
            the image.

    """
    if not all(math.isfinite(v) for v in crop.as_tuple()):
        msg = "crop values must be finite numbers"
        raise ValueError(msg)
    if crop.x < 0 or crop.y < 0:
        msg = "crop origin must not be negative"
        raise ValueError(msg)
    if crop.w < CROP_MIN_PRESET_SIZE or crop.h < CROP_MIN_PRESET_SIZE:
        msg = f"crop width and height must be at least {CROP_MIN_PRESET_SIZE:g}"
        raise ValueError(msg)
    if crop.x + crop.w > CROP_FULL or crop.y + crop.h > CROP_FULL:
        msg = "crop must lie within the image"
        raise ValueError(msg)
    return crop


def parse_crop_preset(text: str) -> tuple[int, CropRect]:
    """
    Parse a ``N,x,y,w,h`` preset into an image index and crop.

    Raises:
        ValueError: On malformed numbers, an out of range index, or a crop
            that fails :func:`validate_preset`.

    """
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != _PRESET_FIELDS:
        msg = "must look like N,x,y,w,h"
        raise ValueError(msg)
    try:
        index = int(parts[0])
        x, y, w, h = (float(p) for p in parts[1:])
    except ValueError as exc:
        msg = "index must be an integer and x,y,w,h numbers"
        raise ValueError(msg) from exc
    if index < 0 or index >= MAX_IMAGE:
        msg = f"image index must be in range 0 - {MAX_IMAGE - 1}"
        raise ValueError(msg)
    return index, validate_preset(CropRect(x, y, w, h))


def compose(old: CropRect, pending: CropRect) -> CropRect:
    """
    Fold ``pending`` (percent of the displayed crop) into ``old``.

    The result is expressed relative to the original image.
    """
    return CropRect(
        x=old.x + pending.x * old.w / 100,
        y=old.y + pending.y * old.h / 100,
        w=pending.w * old.w / 100,
        h=pending.h * old.h / 100,
    )


def sanitize(crop: CropRect) -> CropRect:
    """
    Clamp the origin to ``[0, 98]`` and pull the far edges below 100.

    Guards against floating point drift from repeated half-step edits.
    Applying it twice gives the same result as applying it once.
    """
    x = min(max(crop.x, 0.0), CROP_SANITIZE_ORIGIN_MAX)
    y = min(max(crop.y, 0.0), CROP_SANITIZE_ORIGIN_MAX)
    w, h = crop.w, crop.h
    if x + w >= CROP_SANITIZE_EDGE_MAX:
        w = CROP_SANITIZE_EDGE_MAX - x
    if y + h >= CROP_SANITIZE_EDGE_MAX:
        h = CROP_SANITIZE_EDGE_MAX - y
    return CropRect(x, y, w, h)


def to_pixel_box(
    crop: CropRect,
    width: int,
    height: int,
) -> tuple[int, int, int, int]:
    """
    Map a crop onto an image of ``width`` x ``height`` pixels.

    Returns ``(left, top, crop_w, crop_h)`` with each value rounded half to
    even, clipped to the image and at least one pixel in size.
    """
    left = min(round(width * crop.x / 100), width - 1)
    top = min(round(height * crop.y / 100), height - 1)
    crop_w = max(1, min(round(width * crop.w / 100), width - left))
    crop_h = max(1, min(round(height * crop.h / 100), height - top))
    return left, top, crop_w, crop_h


class HasCrop(Protocol):
    """Anything owning a mutable persistent crop."""

    crop: CropRect


class Direction(Enum):
    """Arrow direction for move and resize edits."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class CropEditor:
    """
    Interactive crop state machine.

    Idle until a selection event starts editing; then holds the selected
    image index and the pending rectangle until commit or cancel. Edit
    operations return True when they changed the pending rectangle and are
    ignored while idle.
    """

    def __init__(self, image_count: int, step: float = CROP_STEP) -> None:
        if image_count <= 0:
            msg = "image_count must be positive"
            raise ValueError(msg)
        self.image_count = image_count
        self.step = step
        self.editing = False
        self.index = 0
        self.pending = INITIAL_PENDING_CROP

    # ---- selection ----
    def select_next(self) -> None:
        """Start editing, or advance to the next image when editing."""
        if self.editing:
            self.index = (self.index + 1) % self.image_count
        self._begin()

    def select_previous(self) -> None:
        """Start editing, or step back to the previous image when editing."""
        if self.editing:
            self.index = (self.index - 1 + self.image_count) % self.image_count
        self._begin()

    def _begin(self) -> None:
        self.pending = INITIAL_PENDING_CROP
        self.editing = True

    def cancel(self) -> bool:
        """Leave editing without touching any persistent crop."""
        if not self.editing:
            return False
        self.editing = False
        return True

    # ---- pending edits ----
    def move(self, direction: Direction) -> bool:
        """Translate the pending crop by one step, stopping at the edges."""
        if not self.editing:
            return False
        p = self.pending
        step = self.step
        if direction is Direction.UP and p.y > 0:
            self.pending = replace(p, y=max(0.0, p.y - step))
        elif direction is Direction.DOWN and p.y + p.h < CROP_FULL:
            self.pending = replace(p, y=min(CROP_FULL - p.h, p.y + step))
        elif direction is Direction.LEFT and p.x > 0:
            self.pending = replace(p, x=max(0.0, p.x - step))
        elif direction is Direction.RIGHT and p.x + p.w < CROP_FULL:
            self.pending = replace(p, x=min(CROP_FULL - p.w, p.x + step))
        else:
            return False
        return True

    def resize(self, direction: Direction) -> bool:
        """
        Resize one axis about the centre.

        Down and left shrink height and width; up and right grow them.
        """
        if not self.editing:
            return False
        p = self.pending
        step = self.step
        half = step / 2
        if direction is Direction.DOWN:
            if p.h <= CROP_MIN_EDIT_SIZE:
                return False
            self.pending = replace(p, h=p.h - step, y=p.y + half)
        elif direction is Direction.LEFT:
            if p.w <= CROP_MIN_EDIT_SIZE:
                return False
            self.pending = replace(p, w=p.w - step, x=p.x + half)
        elif direction is Direction.UP:
            if not _has_room(p.y, p.h):
                return False
            self.pending = replace(p, h=p.h + step, y=p.y - half)
        else:
            if not _has_room(p.x, p.w):
                return False
            self.pending = replace(p, w=p.w + step, x=p.x - half)
        return True

    def shrink(self) -> bool:
        """Shrink both sides by one step, keeping the centre."""
        if not self.editing:
            return False
        p = self.pending
        if p.w <= CROP_MIN_EDIT_SIZE or p.h <= CROP_MIN_EDIT_SIZE:
            return False
        half = self.step / 2
        self.pending = CropRect(
            p.x + half, p.y + half, p.w - self.step, p.h - self.step,
        )
        return True

    def grow(self) -> bool:
        """Grow both sides by one step, keeping the centre."""
        if not self.editing:
            return False
        p = self.pending
        if not (_has_room(p.x, p.w) and _has_room(p.y, p.h)):
            return False
        half = self.step / 2
        self.pending = CropRect(
            p.x - half, p.y - half, p.w + self.step, p.h + self.step,
        )
        return True

    def sanitize_pending(self) -> None:
        """Apply :func:`sanitize` to the pending crop."""
        self.pending = sanitize(self.pending)

    # ---- persistent crop changes ----
    def commit(self, images: Sequence[HasCrop]) -> int | None:
        """
        Compose the pending crop into the selected image and stop editing.

        Returns the index whose crop changed, or None while idle.
        """
        if not self.editing:
            return None
        target = images[self.index]
        target.crop = compose(target.crop, self.pending)
        self.editing = False
        return self.index

    def reset_selected(self, images: Sequence[HasCrop]) -> int | None:
        """Restore the selected image to the full crop while editing."""
        if not self.editing:
            return None
        target = images[self.index]
        if target.crop.is_full():
            return None
        target.crop = FULL_CROP
        return self.index


def reset_all(images: Sequence[HasCrop]) -> list[int]:
    """Restore every image to the full crop, returning changed indices."""
    changed: list[int] = []
    for idx, image in enumerate(images):
        if not image.crop.is_full():
            image.crop = FULL_CROP
            changed.append(idx)
    return changed


def overlay_rect(
    pane_w: int,
    pane_h: int,
    pending: CropRect,
) -> tuple[int, int, int, int]:
    """Return the pending crop as ``(x, y, w, h)`` in pane pixels."""
    return (
        int(pane_w * pending.x / 100),
        int(pane_h * pending.y / 100),
        int(pane_w * pending.w / 100),
        int(pane_h * pending.h / 100),
    )


def _has_room(origin: float, size: float) -> bool:
    return origin > 0 and origin + size < CROP_FULL
