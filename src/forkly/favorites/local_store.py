"""Local durable key-value storage for the offline favorites slot."""

from __future__ import annotations

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

import orjson
from pydantic import TypeAdapter, ValidationError

from forkly.favorites.exceptions import LocalStoreError
from forkly.observability.logging import get_logger
from forkly.schemas.recipe import Recipe


logger = get_logger(__name__)

_VALID_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")
_RECIPE_LIST = TypeAdapter(list[Recipe])


@runtime_checkable
class LocalKeyValueStore(Protocol):
    """A set of named byte slots that survive process restarts."""

    async def read(self, key: str) -> bytes | None:
        """Return the slot's bytes, or ``None`` if it was never written."""
        ...

    async def write(self, key: str, data: bytes) -> None:
        """Replace the slot's bytes."""
        ...


class FileKeyValueStore:
    """One file per key under ``directory``.

    Writes go to a temporary file in the same directory which is then moved
    over the target, so readers never observe a half-written slot. Blocking
    file I/O runs in a worker thread.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            msg = f"Invalid storage key: {key!r}"
            raise LocalStoreError(msg)
        return self.directory / f"{key}.json"

    async def read(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as e:
            msg = f"Failed to read {path}: {e}"
            raise LocalStoreError(msg) from e

    async def write(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(self._write_atomic, path, data)
        except OSError as e:
            msg = f"Failed to write {path}: {e}"
            raise LocalStoreError(msg) from e

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryKeyValueStore:
    """Process-lifetime store used in preview mode and tests."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    async def read(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def write(self, key: str, data: bytes) -> None:
        self._data[key] = data


def encode_favorites(recipes: tuple[Recipe, ...] | list[Recipe]) -> bytes:
    """Serialize favorites as a JSON array of recipe objects."""
    return orjson.dumps([recipe.to_document() for recipe in recipes])


def decode_favorites(data: bytes | None) -> list[Recipe]:
    """Parse a favorites slot.

    Missing, empty or corrupt data yields an empty list (first-run
    behaviour). Duplicate ids keep their first occurrence.
    """
    if not data:
        return []
    try:
        recipes = _RECIPE_LIST.validate_python(orjson.loads(data))
    except (orjson.JSONDecodeError, ValidationError) as e:
        logger.warning(
            "Discarding unreadable local favorites",
            error_type=type(e).__name__,
        )
        return []
    return dedupe_by_id(recipes)


def dedupe_by_id(recipes: list[Recipe]) -> list[Recipe]:
    seen: set[int] = set()
    unique: list[Recipe] = []
    for recipe in recipes:
        if recipe.id not in seen:
            seen.add(recipe.id)
            unique.append(recipe)
    return unique
