"""Pomoplan - focus session scheduling and timer synchronization."""

__version__ = "0.1.0"
