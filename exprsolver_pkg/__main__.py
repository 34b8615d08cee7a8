"""Main entry point for running exprsolver_pkg as a module.

This allows running exprsolver with:
    python -m exprsolver_pkg
    python -m exprsolver_pkg --health-check
    python -m exprsolver_pkg -e "2+2"

This is equivalent to running:
    python -m exprsolver_pkg.cli
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
