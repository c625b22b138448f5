"""Venue booking engine: conflicts, availability, approval and deposit tracking."""

__version__ = "1.0.0"
