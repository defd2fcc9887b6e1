"""
Grid layout engine split into the column/row policy and the pane planner.

The package re-exports the entry points used by the session and the CLI.
"""

from __future__ import annotations

from . import panes, policy
from .panes import (
    LayoutInvariantError,
    Pane,
    PanePlan,
    check_pane_count,
    plan_panes,
)
from .policy import (
    LayoutConfig,
    bounds_for,
    default_cols,
    images_in_first_two_rows,
    init_layout,
    reconcile_canvas_size,
    resolve_cols,
    rows_for,
)

__all__ = [
    "LayoutConfig",
    "LayoutInvariantError",
    "Pane",
    "PanePlan",
    "bounds_for",
    "check_pane_count",
    "default_cols",
    "images_in_first_two_rows",
    "init_layout",
    "panes",
    "plan_panes",
    "policy",
    "reconcile_canvas_size",
    "resolve_cols",
    "rows_for",
]
