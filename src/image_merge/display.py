"""tkinter window that presents rendered frames and queues input events."""

from __future__ import annotations

import tkinter as tk
from collections import deque
from typing import TYPE_CHECKING

from PIL import ImageTk

from image_merge.config_defaults import DEFAULT_WINDOW_TITLE
from image_merge.constants import WRITE_FLASH_MS
from image_merge.events import Event, translate_key
from image_merge.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from PIL import Image

    from image_merge.type_defs import Size

_SHIFT_MASK = 0x0001


class TkDisplay:
    """
    Resizable window backed by a tkinter canvas.

    The toolkit is pumped manually from :meth:`poll_event` instead of
    running ``mainloop`` so the session keeps control of the frame loop.
    """

    def __init__(self, size: Size, title: str = DEFAULT_WINDOW_TITLE) -> None:
        width, height = size
        self._root = tk.Tk()
        self._root.title(title)
        self._root.geometry(f"{width}x{height}")
        self._canvas = tk.Canvas(
            self._root, width=width, height=height,
            highlightthickness=0, background="black",
        )
        self._canvas.pack(fill=tk.BOTH, expand=True)
        self._image_item = self._canvas.create_image(0, 0, anchor=tk.NW)
        self._photo: ImageTk.PhotoImage | None = None
        self._events: deque[Event] = deque()
        self._size = (width, height)
        self._closed = False

        self._root.bind("<Key>", self._on_key)
        self._root.bind("<Map>", self._on_map)
        self._canvas.bind("<Configure>", self._on_configure)
        self._root.protocol("WM_DELETE_WINDOW", self._on_close)

    # ---- toolkit callbacks ----
    def _on_key(self, event: tk.Event) -> None:
        shift = bool(int(event.state) & _SHIFT_MASK)
        translated = translate_key(event.keysym, shift=shift)
        if translated is not None:
            self._events.append(translated)

    def _on_configure(self, event: tk.Event) -> None:
        new_size = (int(event.width), int(event.height))
        if new_size != self._size:
            self._size = new_size
            self._events.append(Event.WINDOW_RESIZED)

    def _on_map(self, _event: tk.Event) -> None:
        self._events.append(Event.WINDOW_RESTORED)

    def _on_close(self) -> None:
        self._events.append(Event.QUIT)

    # ---- Display protocol ----
    def _pump(self) -> None:
        if self._closed:
            return
        try:
            self._root.update()
        except tk.TclError as exc:
            logger.debug("Window gone: %s", exc)
            self._closed = True
            self._events.append(Event.QUIT)

    def size(self) -> Size:
        """Return the current canvas size in pixels."""
        self._pump()
        return self._size

    def poll_event(self) -> Event | None:
        """Process pending toolkit events and return the oldest queued one."""
        self._pump()
        if self._events:
            return self._events.popleft()
        return None

    def present(self, frame: Image.Image) -> None:
        """Show ``frame`` at the top left of the canvas."""
        if self._closed:
            return
        self._photo = ImageTk.PhotoImage(frame)
        self._canvas.itemconfigure(self._image_item, image=self._photo)
        self._pump()

    def flash(self) -> None:
        """Blank the canvas white briefly to confirm a write."""
        if self._closed:
            return
        self._canvas.itemconfigure(self._image_item, state=tk.HIDDEN)
        self._canvas.configure(background="white")
        self._root.update_idletasks()
        self._root.after(WRITE_FLASH_MS)
        self._canvas.configure(background="black")
        self._canvas.itemconfigure(self._image_item, state=tk.NORMAL)
        self._pump()

    def close(self) -> None:
        """Destroy the window."""
        if self._closed:
            return
        self._closed = True
        try:
            self._root.destroy()
        except tk.TclError as exc:
            logger.debug("Window already destroyed: %s", exc)
