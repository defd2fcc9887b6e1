"""
Configuration schema and loader for the image merge tool.

Defines Pydantic models for the grid and output settings and the crop
presets, a TOML-based config loader, and the merge of command-line values
over a loaded file.
"""

from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, Field, field_validator, model_validator

from image_merge.config_defaults import (
    DEFAULT_BATCH,
    DEFAULT_BORDER,
    DEFAULT_LAYOUT,
    DEFAULT_MAX_IMAGE_DIM,
    DEFAULT_OUTPUT_FILENAME,
)
from image_merge.constants import MAX_IMAGE
from image_merge.crop import CropRect, validate_preset
from image_merge.render import parse_border
from image_merge.runtime.output import validate_output_filename
from image_merge.type_defs import LayoutMode


class ConfigurationError(ValueError):
    """Settings that passed schema validation but cannot form a grid."""


class SizeSpec(BaseModel):
    """Width with an optional height; a missing height is derived later."""

    width: int = Field(gt=0)
    height: int | None = Field(None, gt=0)

    def as_tuple(self) -> tuple[int, int | None]:
        """Return (width, height)."""
        return self.width, self.height


class GridConfig(BaseModel):
    """Layout mode, column count and the initial size constraint."""

    layout: LayoutMode = DEFAULT_LAYOUT
    cols: int | None = Field(None, ge=1)
    image_size: SizeSpec | None = None
    canvas_size: SizeSpec | None = None
    max_image_dim: int = Field(DEFAULT_MAX_IMAGE_DIM, ge=1)

    @model_validator(mode="after")
    def _sizes_are_exclusive(self) -> "GridConfig":
        if self.image_size is not None and self.canvas_size is not None:
            msg = "-o and -i options can not be combined"
            raise ValueError(msg)
        return self


class OutputConfig(BaseModel):
    """Output file, border color and batch flag."""

    filename: str = Field(DEFAULT_OUTPUT_FILENAME)
    border: str = Field(DEFAULT_BORDER)
    batch: bool = DEFAULT_BATCH

    @field_validator("filename")
    @classmethod
    def _check_filename(cls, value: str) -> str:
        return validate_output_filename(value)

    @field_validator("border")
    @classmethod
    def _check_border(cls, value: str) -> str:
        parse_border(value)
        return value


class CropPreset(BaseModel):
    """Initial crop for the image at ``index``, in percent."""

    index: int = Field(ge=0, lt=MAX_IMAGE)
    x: float
    y: float
    w: float
    h: float

    @model_validator(mode="after")
    def _check_bounds(self) -> "CropPreset":
        validate_preset(self.to_crop())
        return self

    def to_crop(self) -> CropRect:
        """Return the preset as a :class:`CropRect`."""
        return CropRect(self.x, self.y, self.w, self.h)


class ImageMergeConfig(BaseModel):
    """
    Root configuration object combining all supported sections.

    Mirrors the structure of config.toml: ``[grid]``, ``[output]`` and any
    number of ``[[crops]]`` tables.
    """

    grid: GridConfig = Field(
        default_factory=lambda: GridConfig.model_validate({}),
    )
    output: OutputConfig = Field(
        default_factory=lambda: OutputConfig.model_validate({}),
    )
    crops: list[CropPreset] = Field(default_factory=list)

    def crop_presets(self) -> dict[int, CropRect]:
        """Return presets by image index; later entries win."""
        return {preset.index: preset.to_crop() for preset in self.crops}


class ConfigLoader:
    """
    Loads and parses a TOML configuration file into a typed config object.

    Falls back to defaults for any missing subsections or fields.
    """

    @staticmethod
    def load(path: str) -> ImageMergeConfig:
        """
        Load an image merge configuration from a TOML file.

        Raises:
            FileNotFoundError: If ``path`` is not a file.
            pydantic.ValidationError: If the contents fail validation.

        """
        config_path = Path(path)
        if not config_path.is_file():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with config_path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)

        return ImageMergeConfig.model_validate(doc.unwrap())


def _size_dict(size: tuple[int, int | None]) -> dict[str, int | None]:
    return {"width": size[0], "height": size[1]}


def build_config_from_cli(
    args: dict[str, Any],
    base_config: ImageMergeConfig | None = None,
) -> ImageMergeConfig:
    """
    Overlay parsed command-line values on ``base_config``.

    Values left as None on the command line keep the file (or default)
    value. A size given on the command line replaces both size settings of
    the file, since only one of them may be active. Command-line crop
    presets are applied after those of the file.

    Raises:
        pydantic.ValidationError: If the merged values are invalid.

    """
    data: dict[str, Any] = (
        base_config.model_dump(mode="python")
        if base_config is not None
        else {"grid": {}, "output": {}, "crops": []}
    )
    grid = data["grid"]
    output = data["output"]

    if args.get("layout") is not None:
        grid["layout"] = args["layout"]
    if args.get("cols") is not None:
        grid["cols"] = args["cols"]

    image_size = args.get("image_size")
    canvas_size = args.get("canvas_size")
    if image_size is not None or canvas_size is not None:
        grid["image_size"] = (
            _size_dict(image_size) if image_size is not None else None
        )
        grid["canvas_size"] = (
            _size_dict(canvas_size) if canvas_size is not None else None
        )

    if args.get("output") is not None:
        output["filename"] = args["output"]
    if args.get("border") is not None:
        output["border"] = args["border"]
    if args.get("batch"):
        output["batch"] = True

    for index, crop in args.get("crops") or []:
        data["crops"].append(
            {"index": index, "x": crop.x, "y": crop.y, "w": crop.w,
             "h": crop.h},
        )

    return ImageMergeConfig.model_validate(data)
