"""Numeric helpers shared by the layout engine and the renderer."""

from __future__ import annotations

from dataclasses import dataclass

from image_merge.constants import DEFAULT_ASPECT_RATIO


def ceil_div(numerator: int, denominator: int) -> int:
    """Return ``ceil(numerator / denominator)`` for positive integers."""
    if denominator <= 0:
        msg = f"denominator must be positive, got {denominator}"
        raise ValueError(msg)
    return -(-numerator // denominator)


def height_for_width(width: int, aspect: float = DEFAULT_ASPECT_RATIO) -> int:
    """Return the truncated height keeping ``width / height == aspect``."""
    return int(width / aspect)


def grid_height_for_width(
    width: int,
    rows: int,
    cols: int,
    aspect: float = DEFAULT_ASPECT_RATIO,
) -> int:
    """
    Return the canvas height for ``width`` so each cell is roughly ``aspect``.

    The expression is evaluated left to right and truncated; recorded batch
    command lines depend on this exact rounding.
    """
    return int(width / aspect * rows / cols)


@dataclass(frozen=True)
class Rect:
    """Integer rectangle given by its top left corner and size."""

    x: int
    y: int
    w: int
    h: int

    @property
    def x1(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.w

    @property
    def y1(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.h

    def size(self) -> tuple[int, int]:
        """Return (w, h)."""
        return self.w, self.h

    def inset(self, px: int) -> Rect:
        """Return a copy shrunk by ``px`` on every side, never negative."""
        dx = min(px, self.w // 2)
        dy = min(px, self.h // 2)
        return Rect(self.x + dx, self.y + dy, self.w - 2 * dx, self.h - 2 * dy)

    def is_empty(self) -> bool:
        """Return True when the rectangle covers no pixels."""
        return self.w <= 0 or self.h <= 0
