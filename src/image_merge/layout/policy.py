"""
Grid policy: column bounds, default column counts, rows and canvas size.

All formulas here are part of the batch reproduction contract. A command
line logged by one run must yield the identical grid on the next run, so
the defaults and the first-double-size row math are reproduced exactly
rather than derived from a geometric optimum.
"""

from __future__ import annotations

from dataclasses import dataclass

from image_merge.config_defaults import (
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_WIDTH,
)
from image_merge.constants import EQUAL_SIZE_COLS, FIRST_DOUBLE_SIZE_COLS
from image_merge.geometry import (
    ceil_div,
    grid_height_for_width,
    height_for_width,
)
from image_merge.type_defs import LayoutMode, Size

# Image count -> default column count for the equal-size layout
_EQUAL_SIZE_DEFAULT_COLS = {1: 1, 2: 2, 3: 3, 4: 2}
_EQUAL_SIZE_FALLBACK_COLS = 3

# First-double-size needs two columns for a single image, three otherwise
_DOUBLE_SIZE_SINGLE_IMAGE_COLS = 2
_DOUBLE_SIZE_FALLBACK_COLS = 3

# The enlarged first pane spans this many rows and columns
_DOUBLE_SPAN = 2

PartialSize = tuple[int, int | None]


def _as_mode(mode: LayoutMode | int) -> LayoutMode:
    try:
        return LayoutMode(mode)
    except ValueError as exc:
        msg = f"layout {mode} not supported"
        raise ValueError(msg) from exc


def bounds_for(mode: LayoutMode | int) -> tuple[int, int]:
    """Return the inclusive ``(min_cols, max_cols)`` range for ``mode``."""
    if _as_mode(mode) is LayoutMode.EQUAL_SIZE:
        return EQUAL_SIZE_COLS
    return FIRST_DOUBLE_SIZE_COLS


def default_cols(mode: LayoutMode | int, image_count: int) -> int:
    """Return the recommended column count for ``image_count`` images."""
    if _as_mode(mode) is LayoutMode.EQUAL_SIZE:
        return _EQUAL_SIZE_DEFAULT_COLS.get(
            image_count, _EQUAL_SIZE_FALLBACK_COLS,
        )
    if image_count == 1:
        return _DOUBLE_SIZE_SINGLE_IMAGE_COLS
    return _DOUBLE_SIZE_FALLBACK_COLS


def images_in_first_two_rows(cols: int) -> int:
    """
    Return how many images the first two rows hold in first-double-size.

    The enlarged pane counts once; every column right of the 2x2 block adds
    one slot per row.
    """
    return 1 + _DOUBLE_SPAN * (cols - _DOUBLE_SPAN)


def rows_for(mode: LayoutMode | int, image_count: int, cols: int) -> int:
    """Return the number of grid rows needed for ``image_count`` images."""
    if _as_mode(mode) is LayoutMode.EQUAL_SIZE:
        return ceil_div(image_count, cols)

    first_two = images_in_first_two_rows(cols)
    if first_two >= image_count:
        return _DOUBLE_SPAN
    return _DOUBLE_SPAN + ceil_div(image_count - first_two, cols)


def resolve_cols(
    mode: LayoutMode | int,
    image_count: int,
    requested: int | None,
) -> int:
    """
    Validate a requested column count or pick the default.

    Raises:
        ValueError: If ``requested`` lies outside the bounds for ``mode``.

    """
    min_cols, max_cols = bounds_for(mode)
    if requested is None:
        return default_cols(mode, image_count)
    if requested < min_cols or requested > max_cols:
        msg = f"cols {requested} not in range {min_cols} - {max_cols}"
        raise ValueError(msg)
    return requested


def reconcile_canvas_size(  # noqa: PLR0913
    mode: LayoutMode | int,
    image_count: int,
    cols: int,
    image_size: PartialSize | None = None,
    canvas_size: PartialSize | None = None,
) -> Size:
    """
    Derive the initial canvas size from per-image or canvas constraints.

    At most one of ``image_size`` and ``canvas_size`` may be given; either
    may omit its height, in which case it is derived from the default
    aspect ratio.

    Raises:
        ValueError: If both constraints are supplied.

    """
    if image_size is not None and canvas_size is not None:
        msg = "-o and -i options can not be combined"
        raise ValueError(msg)

    rows = rows_for(mode, image_count, cols)

    if canvas_size is None:
        if image_size is None:
            image_w, image_h = DEFAULT_IMAGE_WIDTH, DEFAULT_IMAGE_HEIGHT
        else:
            image_w, maybe_h = image_size
            image_h = (
                height_for_width(image_w) if maybe_h is None else maybe_h
            )
        return image_w * cols, image_h * rows

    canvas_w, canvas_h = canvas_size
    if canvas_h is None:
        canvas_h = grid_height_for_width(canvas_w, rows, cols)
    return canvas_w, canvas_h


@dataclass(slots=True)
class LayoutConfig:
    """
    Process-wide layout state.

    Seeded once from the configuration, then mutated by column changes and
    window resizes. Read every frame by the pane planner.
    """

    mode: LayoutMode
    cols: int
    min_cols: int
    max_cols: int
    canvas_w: int
    canvas_h: int

    @property
    def canvas_size(self) -> Size:
        """Return (canvas_w, canvas_h)."""
        return self.canvas_w, self.canvas_h

    def change_cols(self, delta: int) -> bool:
        """Step the column count, returning False at the policy bound."""
        target = self.cols + delta
        if target < self.min_cols or target > self.max_cols:
            return False
        self.cols = target
        return True

    def resize(self, width: int, height: int) -> bool:
        """Record a new canvas size, returning True when it changed."""
        if (width, height) == (self.canvas_w, self.canvas_h):
            return False
        self.canvas_w, self.canvas_h = width, height
        return True


def init_layout(
    mode: LayoutMode | int,
    image_count: int,
    *,
    cols: int | None = None,
    image_size: PartialSize | None = None,
    canvas_size: PartialSize | None = None,
) -> LayoutConfig:
    """Build the initial :class:`LayoutConfig` for a run."""
    layout_mode = _as_mode(mode)
    if image_count <= 0:
        msg = "at least one image is required"
        raise ValueError(msg)
    min_cols, max_cols = bounds_for(layout_mode)
    resolved = resolve_cols(layout_mode, image_count, cols)
    canvas_w, canvas_h = reconcile_canvas_size(
        layout_mode, image_count, resolved,
        image_size=image_size, canvas_size=canvas_size,
    )
    return LayoutConfig(
        mode=layout_mode,
        cols=resolved,
        min_cols=min_cols,
        max_cols=max_cols,
        canvas_w=canvas_w,
        canvas_h=canvas_h,
    )
