"""Patch release checker for pinned upstream projects."""

__version__ = "0.3.0"
