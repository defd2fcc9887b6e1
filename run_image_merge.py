"""
run_image_merge.py — CLI Entry Point

This script serves as the command-line interface entry point for the
image merge tool. It forwards execution to the CLI logic defined in
`src/image_merge/cli.py`.

Usage:
    python run_image_merge.py [OPTIONS] [JPEG_OR_PNG_FILES...]

This wrapper allows you to run the tool directly without needing to
modify PYTHONPATH or install the project as a package.

For help on available options, run:
    python run_image_merge.py -h
"""
import sys
# Source code in src/ subdirectory
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import image_merge.cli as im_cli

if __name__ == "__main__":
    sys.exit(im_cli.main())
