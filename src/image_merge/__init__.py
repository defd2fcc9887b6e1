"""Public package exports for the image merge tool."""

from __future__ import annotations

from .crop import CropEditor, CropRect, compose, sanitize
from .layout import LayoutConfig, PanePlan, init_layout, plan_panes
from .session import CompositionSession

__all__ = [
    "CompositionSession",
    "CropEditor",
    "CropRect",
    "LayoutConfig",
    "PanePlan",
    "compose",
    "init_layout",
    "plan_panes",
    "sanitize",
]
