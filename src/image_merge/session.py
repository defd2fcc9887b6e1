"""
Composition session: per-frame layout, rendering and event routing.

The session owns all mutable state of a run: the image slots with their
crops and render caches, the :class:`LayoutConfig`, and the crop editor.
State changes only in response to a fully consumed event or a completed
frame. Interactive mode drives the loop through a :class:`Display`; batch
mode renders a single frame headless and writes it.
"""

from __future__ import annotations

import shlex
import time
from typing import TYPE_CHECKING, Protocol

from image_merge.constants import IDLE_POLL_SECONDS, PROGRAM_NAME
from image_merge.crop import CropEditor, Direction, reset_all
from image_merge.events import Event
from image_merge.layout import check_pane_count, plan_panes
from image_merge.logging_utils import logger
from image_merge.render import Overlay, compose_frame, invalidate_all
from image_merge.runtime.output import write_output

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from PIL import Image

    from image_merge.image_io import SourceImage
    from image_merge.layout import LayoutConfig, PanePlan
    from image_merge.render import BorderStyle
    from image_merge.type_defs import Size


class Display(Protocol):
    """Window collaborator used by the interactive loop."""

    def size(self) -> Size:
        """Return the current drawable size."""
        ...

    def poll_event(self) -> Event | None:
        """Return the next pending event without blocking."""
        ...

    def present(self, frame: Image.Image) -> None:
        """Show a rendered frame."""
        ...

    def flash(self) -> None:
        """Give visual feedback that the output was written."""
        ...

    def close(self) -> None:
        """Tear the window down."""
        ...


_MOVES = {
    Event.MOVE_UP: Direction.UP,
    Event.MOVE_DOWN: Direction.DOWN,
    Event.MOVE_LEFT: Direction.LEFT,
    Event.MOVE_RIGHT: Direction.RIGHT,
}

_RESIZES = {
    Event.GROW_HEIGHT: Direction.UP,
    Event.SHRINK_HEIGHT: Direction.DOWN,
    Event.SHRINK_WIDTH: Direction.LEFT,
    Event.GROW_WIDTH: Direction.RIGHT,
}


class CompositionSession:
    """Holds the images of one run and turns events into frames."""

    def __init__(  # noqa: PLR0913
        self,
        images: Sequence[SourceImage],
        layout: LayoutConfig,
        border: BorderStyle,
        output_path: str,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.images = list(images)
        self.layout = layout
        self.border = border
        self.output_path = output_path
        self.editor = CropEditor(len(self.images))
        self.done = False
        self.write_requested = False
        self._sleep = sleep

    @property
    def image_count(self) -> int:
        """Number of image slots, loaded or not."""
        return len(self.images)

    def overlay(self) -> Overlay | None:
        """Return the crop overlay to draw, if editing."""
        if not self.editor.editing:
            return None
        return Overlay(index=self.editor.index, crop=self.editor.pending)

    # ---- frames ----
    def plan(self) -> PanePlan:
        """Plan panes for the current layout and verify the pane count."""
        plan = plan_panes(
            self.layout.mode,
            self.image_count,
            self.layout.canvas_w,
            self.layout.canvas_h,
            self.layout.cols,
            self.border.width,
        )
        check_pane_count(plan, self.image_count)
        return plan

    def render_frame(
        self,
        canvas_size: Size | None = None,
    ) -> tuple[Image.Image, PanePlan]:
        """
        Render one frame.

        ``canvas_size`` is the drawable size reported by the window; a
        change since the previous frame invalidates every cached render.
        """
        if canvas_size is not None and self.layout.resize(*canvas_size):
            invalidate_all(self.images)
        self.editor.sanitize_pending()
        plan = self.plan()
        frame = compose_frame(
            self.images,
            plan,
            self.layout.canvas_size,
            self.border,
            self.overlay(),
        )
        return frame, plan

    # ---- events ----
    def handle_event(self, event: Event) -> bool:  # noqa: C901, PLR0911, PLR0912
        """
        Apply ``event`` to the session state.

        Returns True when the event is one the session acts on, which means
        the caller should redraw. Crop edits while not editing are consumed
        without effect, as are column changes at the policy bound.
        """
        if event is Event.QUIT:
            self.done = True
        elif event is Event.WRITE:
            self.write_requested = True
            self.editor.cancel()
        elif event in (Event.COLS_DECREASE, Event.COLS_INCREASE):
            delta = -1 if event is Event.COLS_DECREASE else 1
            if self.layout.change_cols(delta):
                invalidate_all(self.images)
        elif event is Event.SELECT_NEXT:
            self.editor.select_next()
        elif event is Event.SELECT_PREVIOUS:
            self.editor.select_previous()
        elif event in _MOVES:
            self.editor.move(_MOVES[event])
        elif event in _RESIZES:
            self.editor.resize(_RESIZES[event])
        elif event is Event.SHRINK:
            self.editor.shrink()
        elif event is Event.GROW:
            self.editor.grow()
        elif event is Event.CANCEL:
            self.editor.cancel()
        elif event is Event.COMMIT:
            self._invalidate(self.editor.commit(self.images))
        elif event is Event.RESET_SELECTED:
            self._invalidate(self.editor.reset_selected(self.images))
        elif event is Event.RESET_ALL:
            for idx in reset_all(self.images):
                self._invalidate(idx)
        elif event in (Event.WINDOW_RESIZED, Event.WINDOW_RESTORED):
            invalidate_all(self.images)
        else:
            return False
        return True

    def _invalidate(self, index: int | None) -> None:
        if index is not None:
            self.images[index].invalidate_cache()

    # ---- output ----
    def reconstruction_command(self, plan: PanePlan) -> str:
        """
        Return a batch command line that recreates the current composite.

        Only crops that differ from the full-image default are emitted.
        """
        args = [
            PROGRAM_NAME,
            "-o", f"{plan.used_w}x{plan.used_h}",
            "-c", str(self.layout.cols),
            "-f", self.output_path,
            "-l", str(int(self.layout.mode)),
            "-b", self.border.name,
            "-z",
        ]
        for idx, image in enumerate(self.images):
            if not image.crop.is_full():
                c = image.crop
                args += ["-k", f"{idx},{c.x:g},{c.y:g},{c.w:g},{c.h:g}"]
        args += [image.path for image in self.images]
        return shlex.join(args)

    def write(self, frame: Image.Image, plan: PanePlan) -> Path:
        """Write ``frame`` to the output path and log how to recreate it."""
        logger.info("%s", self.reconstruction_command(plan))
        return write_output(frame, plan.used_size, self.output_path)

    def run_batch(self) -> Path:
        """Render one frame at the configured size, write it and return."""
        frame, plan = self.render_frame()
        return self.write(frame, plan)

    def run_interactive(self, display: Display) -> None:
        """Run the event loop until the user quits."""
        try:
            while not self.done:
                frame, plan = self.render_frame(display.size())
                display.present(frame)
                if self.write_requested:
                    self.write_requested = False
                    try:
                        self.write(frame, plan)
                    except OSError as exc:
                        logger.error("Failed to write %s: %s",
                                     self.output_path, exc)
                    else:
                        display.flash()
                    continue
                self._wait_for_event(display)
        finally:
            display.close()

    def _wait_for_event(self, display: Display) -> None:
        while True:
            event = display.poll_event()
            if event is not None and self.handle_event(event):
                return
            if event is None:
                self._sleep(IDLE_POLL_SECONDS)
