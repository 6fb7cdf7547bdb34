"""Hearing scheduling conflict detection and override resolution."""

__version__ = "0.1.0"
