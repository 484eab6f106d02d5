#!/usr/bin/env python3
"""
mdtoolbar - Markdown formatting toggles from the shell

Simple usage:
    python toolbar.py detect notes.md --start 12             # Show context at offset 12
    python toolbar.py apply notes.md bold -s 0 -e 5          # Print text with bold toggled
    python toolbar.py apply notes.md bulletList -s 0 -e 40 -w  # Edit the file in place
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from mdtoolbar.cli import app

if __name__ == "__main__":
    app()
