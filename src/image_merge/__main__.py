"""Allow ``python -m image_merge``."""

from image_merge.cli import console_main

console_main()
