"""Runtime utilities for output validation and writing."""

from .output import validate_output_filename, write_output

__all__ = [
    "validate_output_filename",
    "write_output",
]
