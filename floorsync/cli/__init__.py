"""
floorsync Command-Line Interface.

Provides CLI commands for managing floor plans, versions and merges.
"""

from floorsync.cli.main import app

__all__ = ["app"]
