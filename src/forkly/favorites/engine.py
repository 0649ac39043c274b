"""Favorites synchronization engine.

Owns the in-memory favorites set and keeps it in step with two stores:
- the local key-value slot, written on every persist regardless of identity
- the remote per-user collection, mirrored whenever a user is signed in

All state lives on the asyncio event loop. Every identity change opens a new
session; work started under an older session (loads, persists) is discarded
when it completes so it can never overwrite the current user's set.

Toggles are recorded as intents (recipe, wanted) until a persist has stored
them. A load in flight holds back every persist of its session; when it
completes, the outstanding intents are applied to the loaded set and the
queued persists write that merged set.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from forkly.core.observable import Observable
from forkly.favorites.exceptions import LocalStoreError, RemoteStoreError
from forkly.favorites.local_store import decode_favorites, dedupe_by_id, encode_favorites
from forkly.observability.logging import bind_context, get_logger


if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine
    from typing import Any

    from forkly.auth.models import AuthUser
    from forkly.auth.protocol import IdentityProvider
    from forkly.favorites.local_store import LocalKeyValueStore
    from forkly.favorites.remote_store import RemoteFavoritesStore
    from forkly.schemas.recipe import Recipe


logger = get_logger(__name__)


@dataclass(eq=False)
class _Session:
    """One identity epoch. Replaced, never mutated into another user."""

    token: int
    user: AuthUser | None
    # Set once a load has completed and none is in flight.
    idle: asyncio.Event = field(default_factory=asyncio.Event)
    loads: int = 0
    # Toggles not yet stored by a persist, as (recipe, wanted).
    intents: list[tuple[Recipe, bool]] = field(default_factory=list)

    @property
    def user_id(self) -> str | None:
        return self.user.uid if self.user else None

    @property
    def loading(self) -> bool:
        return self.loads > 0


def _toggle_in(favorites: list[Recipe], recipe: Recipe) -> bool:
    """Remove ``recipe`` by id if present, else append it. True if added."""
    for index, existing in enumerate(favorites):
        if existing.id == recipe.id:
            del favorites[index]
            return False
    favorites.append(recipe)
    return True


def _apply_intent(favorites: list[Recipe], recipe: Recipe, wanted: bool) -> None:
    """Make ``recipe`` present or absent by id, whatever it was before."""
    for index, existing in enumerate(favorites):
        if existing.id == recipe.id:
            if not wanted:
                del favorites[index]
            return
    if wanted:
        favorites.append(recipe)


class FavoritesSyncEngine(Observable):
    """Authoritative favorites set for the active identity.

    Example:
        ```python
        engine = FavoritesSyncEngine(identity, FileKeyValueStore(path), remote)
        await engine.start()

        task = engine.toggle(recipe)   # in-memory change is immediate
        assert engine.is_favorite(recipe)
        saved = await task             # persist outcome

        await engine.close()
        ```
    """

    def __init__(
        self,
        identity: IdentityProvider,
        local_store: LocalKeyValueStore,
        remote_store: RemoteFavoritesStore | None = None,
        *,
        storage_key: str = "favoriteRecipes",
        preview_mode: bool = False,
    ) -> None:
        super().__init__()
        self._identity = identity
        self._local_store = local_store
        self._remote_store = remote_store
        self.storage_key = storage_key
        self.preview_mode = preview_mode

        self._favorites: list[Recipe] = []
        self.is_loading = False
        self.error_message: str | None = None

        self._tokens = itertools.count(1)
        self._session = _Session(token=next(self._tokens), user=identity.current_user)
        self._persist_lock = asyncio.Lock()
        self._pending: set[asyncio.Task[Any]] = set()
        self._unsubscribe: Callable[[], None] | None = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def favorites(self) -> tuple[Recipe, ...]:
        """Current favorites in insertion order."""
        return tuple(self._favorites)

    @property
    def user_id(self) -> str | None:
        return self._session.user_id

    @property
    def session_token(self) -> int:
        return self._session.token

    def is_favorite(self, recipe: Recipe) -> bool:
        return any(existing.id == recipe.id for existing in self._favorites)

    def get_favorite(self, recipe_id: int) -> Recipe | None:
        for existing in self._favorites:
            if existing.id == recipe_id:
                return existing
        return None

    def _remote_enabled(self, session: _Session) -> bool:
        return (
            session.user is not None
            and not self.preview_mode
            and self._remote_store is not None
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Follow the identity signal and load the current user's favorites."""
        if self._unsubscribe is None:
            self._unsubscribe = self._identity.subscribe(self._on_identity_changed)
        current = self._identity.current_user
        if (current.uid if current else None) != self._session.user_id:
            stale = self._session
            self._session = _Session(token=next(self._tokens), user=current)
            stale.idle.set()
        bind_context(user_id=self._session.user_id, favorites_session=self._session.token)
        logger.info("Favorites engine started", preview_mode=self.preview_mode)
        await self.reload()

    async def close(self) -> None:
        """Stop following identity changes and wait for pending writes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        session = self._session
        if not session.idle.is_set() and not session.loading:
            # Persists wait for a first load that will never happen now.
            for task in self._pending:
                task.cancel()
        await self.drain()
        logger.debug("Favorites engine closed")

    async def drain(self) -> None:
        """Wait until every scheduled persist and transition has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("Favorites background task failed")

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def toggle(self, recipe: Recipe) -> asyncio.Task[bool]:
        """Add or remove ``recipe`` and schedule a write-through persist.

        The in-memory set and subscribers are updated before this returns.
        The returned task resolves to whether the persist succeeded.
        """
        session = self._session
        added = _toggle_in(self._favorites, recipe)
        session.intents.append((recipe, added))
        logger.debug(
            "Favorite toggled",
            recipe_id=recipe.id,
            added=added,
            count=len(self._favorites),
        )
        self._notify()
        return self._spawn(self._persist(session))

    async def _persist(self, session: _Session) -> bool:
        # No persist while a load of this session is in flight.
        while True:
            await session.idle.wait()
            async with self._persist_lock:
                if session is not self._session:
                    logger.debug(
                        "Dropping persist from superseded session", token=session.token
                    )
                    return False
                if session.idle.is_set():
                    return await self._write_through(session)

    async def _write_through(self, session: _Session) -> bool:
        snapshot = tuple(self._favorites)
        stored = len(session.intents)
        saved = await self._write_local(snapshot)

        if not self._remote_enabled(session):
            if saved:
                del session.intents[:stored]
            return saved

        assert self._remote_store is not None
        assert session.user_id is not None
        try:
            await self._remote_store.replace_all(session.user_id, snapshot)
        except RemoteStoreError as e:
            if session is self._session:
                self.error_message = f"Could not save favorites: {e}"
                self._notify()
            return False
        del session.intents[:stored]
        return saved

    async def _write_local(self, recipes: tuple[Recipe, ...]) -> bool:
        try:
            await self._local_store.write(self.storage_key, encode_favorites(recipes))
        except LocalStoreError as e:
            logger.warning("Failed to write local favorites", error=str(e))
            return False
        return True

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def reload(self) -> None:
        """Re-read favorites for the current identity."""
        await self._reload(self._session)

    async def _reload(self, session: _Session) -> None:
        # Wait out a persist mid-write so the load reads what it stored.
        async with self._persist_lock:
            if session is not self._session:
                return
            session.loads += 1
            session.idle.clear()

        self.is_loading = True
        self.error_message = None
        self._notify()

        try:
            recipes = await self._load(session)
        finally:
            session.loads -= 1
            if not session.loading:
                session.idle.set()
                if session is self._session:
                    self.is_loading = False

        if session is not self._session:
            logger.debug("Discarding load from superseded session", token=session.token)
            return

        favorites = dedupe_by_id(recipes)
        for recipe, wanted in session.intents:
            _apply_intent(favorites, recipe, wanted)
        self._favorites = favorites
        logger.info("Favorites loaded", count=len(favorites))
        self._notify()

    async def _load(self, session: _Session) -> list[Recipe]:
        if self._remote_enabled(session):
            assert self._remote_store is not None
            assert session.user_id is not None
            try:
                return await self._remote_store.load(session.user_id)
            except RemoteStoreError as e:
                logger.warning("Falling back to local favorites", error=str(e))
                if session is self._session:
                    self.error_message = f"Could not load favorites: {e}"
        return await self._read_local()

    async def _read_local(self) -> list[Recipe]:
        try:
            data = await self._local_store.read(self.storage_key)
        except LocalStoreError as e:
            logger.warning("Failed to read local favorites", error=str(e))
            return []
        return decode_favorites(data)

    # -------------------------------------------------------------------------
    # Identity transitions
    # -------------------------------------------------------------------------

    def _on_identity_changed(self, user: AuthUser | None) -> None:
        previous = self._session
        if (user.uid if user else None) == previous.user_id:
            return

        session = _Session(token=next(self._tokens), user=user)
        self._session = session
        # Wake persists parked on the old session so they see it is stale.
        previous.idle.set()

        # Neither the departing user's set nor the guest set belongs to the
        # new session.
        self._favorites = []
        self.error_message = None
        bind_context(user_id=session.user_id, favorites_session=session.token)
        logger.info(
            "Favorites session changed",
            previous_user_id=previous.user_id,
            token=session.token,
        )
        self._notify()
        self._spawn(self._transition(previous, session))

    async def _transition(self, previous: _Session, session: _Session) -> None:
        if previous.user is not None:
            # The local slot holds the departing user's favorites.
            async with self._persist_lock:
                await self._write_local(())
        await self._reload(session)
