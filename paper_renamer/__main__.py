"""CLI entry point for paper-renamer.

This module allows the package to be run as: python -m paper_renamer
Or via the installed CLI command: paper-renamer
"""

from .core import main

if __name__ == "__main__":
    main()
