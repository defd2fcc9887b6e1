"""
Test configuration and shared fixtures for image_merge.

This module defines reusable pytest fixtures for image files, decoded
image slots, sessions, and a scripted display that stands in for the
tkinter window. These fixtures support all test modules in the test suite.

Note:
    This file is automatically loaded by pytest and should not be
    renamed.

"""
from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest
from PIL import Image

from image_merge.constants import COLOR_MODE_RGB
from image_merge.events import Event
from image_merge.image_io import SourceImage, decode_image
from image_merge.layout import init_layout
from image_merge.logging_utils import logger
from image_merge.render import parse_border
from image_merge.session import CompositionSession
from image_merge.type_defs import LayoutMode

PALETTE = ["red", "green", "blue", "yellow", "purple", "orange", "white"]


class FakeDisplay:
    """Scripted display that replays events and records frames."""

    def __init__(
        self,
        size: tuple[int, int],
        events: Iterable[Event | None] = (),
    ) -> None:
        self.current_size = size
        self.events: deque[Event | None] = deque(events)
        self.frames: list[Image.Image] = []
        self.flashes = 0
        self.closed = False

    def size(self) -> tuple[int, int]:
        return self.current_size

    def poll_event(self) -> Event | None:
        if not self.events:
            return Event.QUIT
        return self.events.popleft()

    def present(self, frame: Image.Image) -> None:
        self.frames.append(frame)

    def flash(self) -> None:
        self.flashes += 1

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def sample_image() -> Image.Image:
    """Create a sample 100x100 red RGB PIL image."""
    return Image.new(COLOR_MODE_RGB, (100, 100), color="red")


@pytest.fixture
def make_image_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory that writes a solid color image and returns its path."""

    def _make(
        name: str,
        size: tuple[int, int] = (64, 48),
        color: str = "red",
    ) -> Path:
        path = tmp_path / name
        Image.new(COLOR_MODE_RGB, size, color=color).save(path)
        return path

    return _make


@pytest.fixture
def image_paths(make_image_file: Callable[..., Path]) -> list[str]:
    """Four small PNG files of different colors."""
    return [
        str(make_image_file(f"img{i}.png", color=PALETTE[i]))
        for i in range(4)
    ]


@pytest.fixture
def gradient_image(tmp_path: Path) -> Path:
    """Save a 200x100 image whose red channel encodes x and green y."""
    img = Image.new(COLOR_MODE_RGB, (200, 100))
    img.putdata([
        (x % 256, y % 256, 0) for y in range(100) for x in range(200)
    ])
    path = tmp_path / "gradient.png"
    img.save(path)
    return path


@pytest.fixture
def source_images(image_paths: list[str]) -> list[SourceImage]:
    """Decoded slots for the four sample files."""
    return [decode_image(p) for p in image_paths]


@pytest.fixture
def make_session(
    tmp_path: Path,
) -> Callable[..., CompositionSession]:
    """Build sessions over decoded images with small canvases."""

    def _build(
        images: list[SourceImage],
        *,
        mode: LayoutMode = LayoutMode.EQUAL_SIZE,
        cols: int | None = None,
        canvas_size: tuple[int, int | None] | None = (200, 100),
        border: str = "GREEN",
        output: str | None = None,
    ) -> CompositionSession:
        layout = init_layout(
            mode, len(images), cols=cols, canvas_size=canvas_size,
        )
        return CompositionSession(
            images,
            layout,
            parse_border(border),
            output or str(tmp_path / "out.png"),
            sleep=lambda _seconds: None,
        )

    return _build


@pytest.fixture
def make_display() -> Callable[..., FakeDisplay]:
    """Factory for scripted displays: ``make_display(size, events)``."""
    return FakeDisplay


@pytest.fixture(autouse=True)
def enable_logger_propagation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable propagation for the image_merge logger so caplog works."""
    monkeypatch.setattr(logger, "propagate", True)
