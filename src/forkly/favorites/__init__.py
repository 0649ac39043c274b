"""Favorites synchronization: in-memory set, local slot and remote mirror."""

from forkly.favorites.engine import FavoritesSyncEngine
from forkly.favorites.exceptions import FavoritesError, LocalStoreError, RemoteStoreError
from forkly.favorites.local_store import (
    FileKeyValueStore,
    LocalKeyValueStore,
    MemoryKeyValueStore,
    decode_favorites,
    encode_favorites,
)
from forkly.favorites.remote_store import FirestoreFavoritesStore, RemoteFavoritesStore


__all__ = [
    "FavoritesError",
    "FavoritesSyncEngine",
    "FileKeyValueStore",
    "FirestoreFavoritesStore",
    "LocalKeyValueStore",
    "LocalStoreError",
    "MemoryKeyValueStore",
    "RemoteFavoritesStore",
    "RemoteStoreError",
    "decode_favorites",
    "encode_favorites",
]
