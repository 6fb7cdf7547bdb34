"""Command-line interface for the hearing conflict engine."""

from hearing_scheduler import __version__

__all__ = ["__version__"]
