"""Endpoint input capture with a file-backed queue for scheduled embedding."""

__version__ = "0.1.0"
