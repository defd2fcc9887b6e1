"""Top-level orchestration for an image merge run."""

from __future__ import annotations

from typing import TYPE_CHECKING

import image_merge.image_io as im_image_io
from image_merge.config import ConfigurationError
from image_merge.layout import init_layout
from image_merge.logging_utils import logger
from image_merge.render import parse_border
from image_merge.session import CompositionSession

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from image_merge.config import ImageMergeConfig
    from image_merge.image_io import SourceImage
    from image_merge.session import Display
    from image_merge.type_defs import Size


def apply_crop_presets(
    images: Sequence[SourceImage],
    config: ImageMergeConfig,
) -> None:
    """Seed persistent crops from the configured presets."""
    for index, crop in config.crop_presets().items():
        if index >= len(images):
            logger.warning(
                "Ignoring crop for image %d, only %d images given",
                index, len(images),
            )
            continue
        images[index].crop = crop


def build_session(
    image_paths: Sequence[str],
    config: ImageMergeConfig,
) -> CompositionSession:
    """
    Validate the layout, decode the images and assemble a session.

    Layout validation runs before decoding so configuration errors are
    reported without waiting on file I/O.

    Raises:
        ConfigurationError: If the layout, column or border configuration
            is invalid.

    """
    try:
        layout = init_layout(
            config.grid.layout,
            len(image_paths),
            cols=config.grid.cols,
            image_size=(
                config.grid.image_size.as_tuple()
                if config.grid.image_size is not None else None
            ),
            canvas_size=(
                config.grid.canvas_size.as_tuple()
                if config.grid.canvas_size is not None else None
            ),
        )
        border = parse_border(config.output.border)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    images = im_image_io.load_images(image_paths, config.grid.max_image_dim)
    apply_crop_presets(images, config)
    return CompositionSession(images, layout, border, config.output.filename)


def merge_images(
    image_paths: Sequence[str],
    config: ImageMergeConfig,
    display_factory: Callable[[Size], Display] | None = None,
) -> Path | None:
    """
    Run a merge in batch or interactive mode.

    Batch mode returns the written output path. Interactive mode opens a
    window (tkinter unless ``display_factory`` is given) and returns None
    once the user quits.
    """
    session = build_session(image_paths, config)
    if config.output.batch:
        return session.run_batch()

    if display_factory is None:
        from image_merge.display import TkDisplay  # noqa: PLC0415

        display_factory = TkDisplay
    session.run_interactive(display_factory(session.layout.canvas_size))
    return None
