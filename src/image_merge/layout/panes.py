"""Pane planning: turn a grid policy and canvas size into rectangles."""

from __future__ import annotations

from dataclasses import dataclass

from image_merge.constants import PANE_BORDER_WIDTH
from image_merge.geometry import Rect
from image_merge.layout.policy import rows_for
from image_merge.type_defs import LayoutMode


class LayoutInvariantError(RuntimeError):
    """The planner produced fewer panes than there are images."""


@dataclass(frozen=True)
class Pane:
    """Placement for one image: border-inclusive cell and inset content."""

    full: Rect
    content: Rect


@dataclass(frozen=True)
class PanePlan:
    """Result of :func:`plan_panes` for a single frame."""

    panes: tuple[Pane, ...]
    rows: int
    cols: int
    cell_w: int
    cell_h: int
    used_w: int
    used_h: int

    @property
    def pane_count(self) -> int:
        """Number of planned panes."""
        return len(self.panes)

    @property
    def full_rects(self) -> list[Rect]:
        """Border-inclusive rectangles in placement order."""
        return [p.full for p in self.panes]

    @property
    def content_rects(self) -> list[Rect]:
        """Inset content rectangles in placement order."""
        return [p.content for p in self.panes]

    @property
    def used_size(self) -> tuple[int, int]:
        """Canvas area actually covered by panes."""
        return self.used_w, self.used_h


def _make_pane(x: int, y: int, w: int, h: int, border_width: int) -> Pane:
    full = Rect(x, y, w, h)
    return Pane(full=full, content=full.inset(border_width))


def plan_panes(  # noqa: PLR0913
    mode: LayoutMode | int,
    image_count: int,
    canvas_w: int,
    canvas_h: int,
    cols: int,
    border_width: int = PANE_BORDER_WIDTH,
) -> PanePlan:
    """
    Compute the ordered pane rectangles for the current frame.

    Cells are ``canvas_w // cols`` by ``canvas_h // rows``; the remainder of
    the canvas stays unused and is reported through ``used_w``/``used_h``.
    In first-double-size mode the enlarged pane comes first and the 2x2
    block it covers is skipped when emitting the remaining cells.
    """
    rows = rows_for(mode, image_count, cols)
    cell_w = canvas_w // cols
    cell_h = canvas_h // rows

    panes: list[Pane] = []
    double_first = LayoutMode(mode) is LayoutMode.FIRST_DOUBLE_SIZE
    if double_first:
        panes.append(_make_pane(0, 0, 2 * cell_w, 2 * cell_h, border_width))

    for r in range(rows):
        for c in range(cols):
            if double_first and r <= 1 and c <= 1:
                continue
            panes.append(
                _make_pane(cell_w * c, cell_h * r, cell_w, cell_h,
                           border_width),
            )

    return PanePlan(
        panes=tuple(panes),
        rows=rows,
        cols=cols,
        cell_w=cell_w,
        cell_h=cell_h,
        used_w=cell_w * cols,
        used_h=cell_h * rows,
    )


def check_pane_count(plan: PanePlan, image_count: int) -> None:
    """Raise :class:`LayoutInvariantError` if any image lacks a pane."""
    if plan.pane_count < image_count:
        msg = (
            f"pane count {plan.pane_count} is less than "
            f"image count {image_count}"
        )
        raise LayoutInvariantError(msg)
