"""Chunked TCP messaging, recent-file listing and dot detection in images."""

__version__ = "0.1.0"