"""Command-line interface."""
from .commands import main, run

__all__ = ["main", "run"]
