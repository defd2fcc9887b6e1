"""
Defines shared type aliases for the image merge tool.

Centralizes reusable type hints to improve consistency and readability.
"""
from __future__ import annotations

from enum import IntEnum

RGB = tuple[int, int, int]
Size = tuple[int, int]


class LayoutMode(IntEnum):
    """Grid policy; the values are the ``-l`` option numbers."""

    EQUAL_SIZE = 1
    FIRST_DOUBLE_SIZE = 2
