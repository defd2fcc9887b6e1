"""Logical input events and translation from toolkit key names."""

from __future__ import annotations

from enum import Enum, auto


class Event(Enum):
    """Decoded input events understood by the composition session."""

    QUIT = auto()
    WRITE = auto()
    COLS_DECREASE = auto()
    COLS_INCREASE = auto()
    SELECT_NEXT = auto()
    SELECT_PREVIOUS = auto()
    MOVE_UP = auto()
    MOVE_DOWN = auto()
    MOVE_LEFT = auto()
    MOVE_RIGHT = auto()
    GROW_HEIGHT = auto()
    SHRINK_HEIGHT = auto()
    SHRINK_WIDTH = auto()
    GROW_WIDTH = auto()
    SHRINK = auto()
    GROW = auto()
    COMMIT = auto()
    CANCEL = auto()
    RESET_SELECTED = auto()
    RESET_ALL = auto()
    WINDOW_RESIZED = auto()
    WINDOW_RESTORED = auto()


_PLAIN_KEYS: dict[str, Event] = {
    "w": Event.WRITE,
    "q": Event.QUIT,
    "c": Event.COLS_DECREASE,
    "C": Event.COLS_INCREASE,
    "Tab": Event.SELECT_NEXT,
    "ISO_Left_Tab": Event.SELECT_PREVIOUS,
    "Up": Event.MOVE_UP,
    "Down": Event.MOVE_DOWN,
    "Left": Event.MOVE_LEFT,
    "Right": Event.MOVE_RIGHT,
    "minus": Event.SHRINK,
    "KP_Subtract": Event.SHRINK,
    "plus": Event.GROW,
    "equal": Event.GROW,
    "KP_Add": Event.GROW,
    "Return": Event.COMMIT,
    "KP_Enter": Event.COMMIT,
    "Escape": Event.CANCEL,
    "r": Event.RESET_SELECTED,
    "R": Event.RESET_ALL,
}

_SHIFTED_KEYS: dict[str, Event] = {
    "Tab": Event.SELECT_PREVIOUS,
    "Up": Event.GROW_HEIGHT,
    "Down": Event.SHRINK_HEIGHT,
    "Left": Event.SHRINK_WIDTH,
    "Right": Event.GROW_WIDTH,
}


def translate_key(keysym: str, *, shift: bool = False) -> Event | None:
    """
    Map a toolkit key name to an :class:`Event`.

    Letters arrive already case-folded by the toolkit, so ``shift`` only
    matters for Tab and the arrow keys. Unbound keys return None.
    """
    if shift and keysym in _SHIFTED_KEYS:
        return _SHIFTED_KEYS[keysym]
    return _PLAIN_KEYS.get(keysym)
