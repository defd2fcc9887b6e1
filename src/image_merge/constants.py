"""
Constants used internally by the image merge tool.

These are implementation-level values that are not overridden via config
files or CLI arguments. Several of them are part of the reproducible
layout contract: recorded batch command lines depend on them matching
exactly.
"""

# Upper bound on the number of source images; also bounds ``-k`` indices
MAX_IMAGE = 1000

# Height of a cell derived from its width uses this ratio (roughly 4:3)
DEFAULT_ASPECT_RATIO = 1.333333

# Column bounds per layout mode
EQUAL_SIZE_COLS = (1, 10)
FIRST_DOUBLE_SIZE_COLS = (2, 10)

# Interactive crop editing, all values in percent
CROP_STEP = 0.5
CROP_MIN_EDIT_SIZE = 6.0
CROP_MIN_PRESET_SIZE = 5.0
CROP_INITIAL_SIZE = 50.0
CROP_FULL = 100.0

# Per-frame sanitize limits for the in-progress crop
CROP_SANITIZE_ORIGIN_MAX = 98.0
CROP_SANITIZE_EDGE_MAX = 99.9999

# Pane border thickness in pixels
PANE_BORDER_WIDTH = 2

# Crop overlay line thickness in pixels
CROP_OVERLAY_WIDTH = 1

# Idle sleep between empty event polls
IDLE_POLL_SECONDS = 0.001

# Duration of the write confirmation flash in the interactive window
WRITE_FLASH_MS = 60

# Image decoding
COLOR_MODE_RGB = "RGB"
LOAD_PROGRESS_MIN_IMAGES = 8

# Output formats keyed by file extension
OUTPUT_FORMATS = {".jpg": "JPEG", ".png": "PNG"}
JPEG_QUALITY = 95

# Internal color constants
COLOR_BLACK = (0, 0, 0)
COLOR_WHITE = (255, 255, 255)
CANVAS_BACKGROUND = COLOR_BLACK

# Named border palette; NONE disables borders
BORDER_NONE = "NONE"
BORDER_COLORS: dict[str, tuple[int, int, int]] = {
    "PURPLE": (127, 0, 255),
    "BLUE": (0, 0, 255),
    "LIGHT_BLUE": (0, 255, 255),
    "GREEN": (0, 255, 0),
    "YELLOW": (255, 255, 0),
    "ORANGE": (255, 128, 0),
    "PINK": (255, 105, 180),
    "RED": (255, 0, 0),
    "GRAY": (224, 224, 224),
    "WHITE": COLOR_WHITE,
    "BLACK": COLOR_BLACK,
}

# Program name used in the reconstruction command line
PROGRAM_NAME = "image_merge"
