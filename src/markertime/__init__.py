"""Timestamp expressions for Plex marker editing."""

__version__ = "0.1.0"
