"""
Main entry point for running the package as a module.

Usage:
    python -m darkroom presets
    python -m darkroom convert photo.jpg --preset hero --directory blocks/hero --local-root ./storage
    python -m darkroom regenerate --records records.json --all --local-root ./storage
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
