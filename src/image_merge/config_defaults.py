"""Shared default values for user-facing configuration settings."""
from image_merge.type_defs import LayoutMode

# Grid
DEFAULT_LAYOUT = LayoutMode.EQUAL_SIZE
DEFAULT_IMAGE_WIDTH = 320
DEFAULT_IMAGE_HEIGHT = 240
DEFAULT_MAX_IMAGE_DIM = 16384

# Output
DEFAULT_OUTPUT_FILENAME = "out.jpg"
DEFAULT_BORDER = "GREEN"
DEFAULT_BATCH = False

# Window
DEFAULT_WINDOW_TITLE = "image_merge"
