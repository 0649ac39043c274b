"""Favorites storage exceptions.

The sync engine catches these: remote failures degrade to the local store
and set a non-fatal error message, local failures degrade to an empty set.
"""

from __future__ import annotations


class FavoritesError(Exception):
    """Base exception for favorites storage errors."""


class RemoteStoreError(FavoritesError):
    """Raised when the remote per-user favorites collection fails."""


class LocalStoreError(FavoritesError):
    """Raised when the local key-value slot cannot be read or written."""
