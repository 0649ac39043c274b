"""In-memory cache for the featured recipe list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from forkly.schemas.recipe import Recipe


@dataclass(frozen=True)
class CacheEntry:
    """Featured recipes together with the time they were fetched."""

    recipes: tuple[Recipe, ...]
    captured_at: float


class FeaturedCache:
    """Single-slot TTL cache.

    The entry is replaced wholesale by ``store``; nothing else mutates it, so
    a failed refresh leaves the previous entry in place. Time is passed in by
    the caller so tests can drive expiry without sleeping.
    """

    def __init__(self, ttl: float) -> None:
        self.ttl = ttl
        self._entry: CacheEntry | None = None

    @property
    def entry(self) -> CacheEntry | None:
        return self._entry

    def is_valid(self, now: float) -> bool:
        """True while an entry exists and is younger than ``ttl``."""
        if self._entry is None:
            return False
        return now - self._entry.captured_at < self.ttl

    def get(self, now: float) -> list[Recipe] | None:
        """Return the cached recipes if still fresh, otherwise ``None``."""
        if not self.is_valid(now):
            return None
        assert self._entry is not None
        return list(self._entry.recipes)

    def store(self, recipes: list[Recipe], now: float) -> None:
        self._entry = CacheEntry(recipes=tuple(recipes), captured_at=now)

    def clear(self) -> None:
        self._entry = None
