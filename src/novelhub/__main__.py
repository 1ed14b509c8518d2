"""Main entry point for the NovelHub CLI.

Usage:
    python -m novelhub --help
    novelhub --help  # If installed via pip
"""

from novelhub.cli import main

if __name__ == "__main__":
    main()
