"""CLI argument parsing and main entry point."""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING, NoReturn, TypeVar

import image_merge.config as im_config
import image_merge.main as im_main
from image_merge.config_defaults import (
    DEFAULT_BORDER,
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_WIDTH,
    DEFAULT_OUTPUT_FILENAME,
)
from image_merge.constants import BORDER_COLORS, BORDER_NONE, PROGRAM_NAME
from image_merge.crop import parse_crop_preset
from image_merge.layout import LayoutInvariantError
from image_merge.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

EXIT_OK = 0
EXIT_FAILURE = 1

_SIZE_PARTS = 2

RUNTIME_CONTROLS = """\
run time controls - when not in batch mode
  general keyboard controls
    w                 write file containing the combined images
    q                 exit the program
    c, C              decrease or increase the number of image columns

  window resize control
    mouse

  crop image keyboard controls
    Tab, Shift-Tab    select an image to be cropped
    arrow keys        adjust the position of the crop area
    shift arrow keys  adjust the aspect ratio of the crop area
    -, +, =           adjust the size of the crop area (= is same as +)
    Enter             apply the crop
    Esc               exit crop mode without applying the crop
    r                 reset the selected image to its original size
    R                 reset all images to their original size

-i and -o can not be combined"""


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def positive_int(text: str) -> int:
    """Argparse-style validator that enforces a strictly positive integer."""
    try:
        value = int(text)
    except ValueError as exc:
        msg = "must be an integer"
        raise ValueError(msg) from exc
    if value <= 0:
        msg = "must be positive"
        raise ValueError(msg)
    return value


def parse_size(text: str) -> tuple[int, int | None]:
    """Parse ``WxH`` or ``W`` into ``(width, height_or_None)``."""
    parts = text.lower().split("x")
    if len(parts) > _SIZE_PARTS:
        msg = "must look like WxH or W, e.g., 800x600"
        raise ValueError(msg)
    width = positive_int(parts[0])
    height = positive_int(parts[1]) if len(parts) == _SIZE_PARTS else None
    return width, height


def layout_number(text: str) -> int:
    """Parse the ``-l`` layout number."""
    value = positive_int(text)
    if value not in (1, 2):
        msg = "must be 1 (equal size) or 2 (first image double size)"
        raise ValueError(msg)
    return value


T = TypeVar("T")


def _wrap_validator(
    validator: Callable[[str], T],
    error_cls: type[argparse.ArgumentTypeError] = argparse.ArgumentTypeError,
) -> Callable[[str], T]:
    """Convert ``ValueError`` from a validator into ``ArgumentTypeError``."""

    def wrapper(text: str) -> T:
        try:
            return validator(text)
        except ValueError as exc:
            raise error_cls(str(exc)) from exc

    return wrapper


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the command-line interface."""
    colors = ", ".join([BORDER_NONE, *BORDER_COLORS])
    p = _ArgumentParser(
        prog=PROGRAM_NAME,
        description=(
            "Read jpeg and png files and combine them into a single jpeg "
            "or png output file. Each of the images can optionally be "
            "cropped."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=RUNTIME_CONTROLS,
    )
    p.add_argument(
        "images", nargs="*", metavar="JPEG_OR_PNG_FILES",
        help="Images to combine, in placement order")

    sizing = p.add_argument_group("sizing")
    sizing.add_argument(
        "-i", dest="image_size", metavar="WxH|W",
        type=_wrap_validator(parse_size), default=None,
        help=(
            "Initial width/height of each image, default "
            f"{DEFAULT_IMAGE_WIDTH}x{DEFAULT_IMAGE_HEIGHT}; with W alone "
            "the height uses a 1.333 aspect ratio"
        ))
    sizing.add_argument(
        "-o", dest="canvas_size", metavar="WxH|W",
        type=_wrap_validator(parse_size), default=None,
        help=(
            "Initial width/height of the combined output; with W alone the "
            "height follows from the rows, cols and a 1.333 aspect ratio"
        ))
    sizing.add_argument(
        "-c", dest="cols", metavar="NUM",
        type=_wrap_validator(positive_int), default=None,
        help="Initial number of columns, default based on image count "
             "and layout")
    sizing.add_argument(
        "-l", dest="layout", metavar="LAYOUT",
        type=_wrap_validator(layout_number), default=None,
        help="1 = equal size; 2 = first image double size, default 1")

    output = p.add_argument_group("output")
    output.add_argument(
        "-f", dest="output", metavar="NAME", default=None,
        help=("Output filename, must have .jpg or .png extension, default "
              f"'{DEFAULT_OUTPUT_FILENAME}'"))
    output.add_argument(
        "-b", dest="border", metavar="COLOR", default=None,
        help=f"Border color, default {DEFAULT_BORDER}, choices are {colors}")
    output.add_argument(
        "-k", dest="crops", metavar="n,x,y,w,h", action="append",
        type=_wrap_validator(parse_crop_preset), default=None,
        help=("Crop image n; x,y,w,h are in percent; x,y are the upper "
              "left of the crop area; w,h are the size of the crop area"))
    output.add_argument(
        "-z", dest="batch", action="store_true",
        help="Batch mode, the combined output is written and the program "
             "terminates")

    cfg = p.add_argument_group("config")
    cfg.add_argument(
        "--config", type=str, default=None,
        help="Path to config.toml file; command-line options override it")
    cfg.add_argument(
        "--validate-config-only", action="store_true",
        help="Validate config file and exit")

    return p


def log_parameters(
    image_paths: Sequence[str],
    cfg: im_config.ImageMergeConfig,
    config_path: str | None,
) -> None:
    """Log the effective run parameters."""
    if config_path:
        logger.info("Loaded config from: %s", config_path)
    logger.info("Images: %d", len(image_paths))
    logger.info("Layout: %d", int(cfg.grid.layout))
    logger.info("Columns: %s", cfg.grid.cols or "(default)")
    logger.info("Output File: %s", cfg.output.filename)
    logger.info("Border: %s", cfg.output.border)
    logger.info("Batch Mode: %s",
                "Enabled" if cfg.output.batch else "Disabled")


def run_from_args(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> int:
    """Run an image merge from parsed command-line arguments."""
    base_cfg: im_config.ImageMergeConfig | None = None
    try:
        if args.config:
            base_cfg = im_config.ConfigLoader.load(args.config)
            if args.validate_config_only:
                logger.info("Config %s validated successfully.", args.config)
                return EXIT_OK
        cfg = im_config.build_config_from_cli(vars(args), base_config=base_cfg)
    except (ValueError, FileNotFoundError) as exc:
        parser.error(str(exc))

    if not args.images:
        parser.print_help()
        return EXIT_FAILURE

    log_parameters(args.images, cfg, args.config)

    try:
        im_main.merge_images(args.images, cfg)
    except im_config.ConfigurationError as exc:
        parser.error(str(exc))
    except LayoutInvariantError as exc:
        logger.critical("%s", exc)
        return EXIT_FAILURE
    except OSError as exc:
        logger.critical("Failed to write %s: %s", cfg.output.filename, exc)
        return EXIT_FAILURE
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Parse command-line arguments and run the merge."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    return run_from_args(args, parser)


def console_main() -> NoReturn:
    """Entry point for the ``image-merge`` console script."""
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    console_main()
