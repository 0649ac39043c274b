"""Forkly recipe discovery core: recipe API client and favorites sync."""

__version__ = "0.1.0"
