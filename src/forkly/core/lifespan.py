"""Application wiring and lifespan.

``create_container`` builds every collaborator from settings;
``lifespan`` sets up logging, initializes clients and the favorites engine,
and tears everything down in reverse order.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from forkly.auth.firebase import FirebaseIdentityProvider
from forkly.auth.preview import PreviewIdentityProvider
from forkly.clients.spoonacular.client import SpoonacularClient
from forkly.core.config import Settings, get_settings
from forkly.favorites.engine import FavoritesSyncEngine
from forkly.favorites.local_store import FileKeyValueStore, MemoryKeyValueStore
from forkly.favorites.remote_store import FirestoreFavoritesStore
from forkly.observability.logging import get_logger, setup_logging
from forkly.viewmodels.auth import AuthViewModel
from forkly.viewmodels.detail import RecipeDetailViewModel
from forkly.viewmodels.featured import FeaturedRecipesViewModel
from forkly.viewmodels.search import RecipeSearchViewModel


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from forkly.favorites.local_store import LocalKeyValueStore
    from forkly.favorites.remote_store import RemoteFavoritesStore


logger = get_logger(__name__)


@dataclass
class Container:
    """Every long-lived collaborator of the application."""

    settings: Settings
    recipe_client: SpoonacularClient
    identity: FirebaseIdentityProvider | PreviewIdentityProvider
    local_store: LocalKeyValueStore
    remote_store: RemoteFavoritesStore | None
    favorites: FavoritesSyncEngine
    featured: FeaturedRecipesViewModel
    search: RecipeSearchViewModel
    detail: RecipeDetailViewModel
    auth: AuthViewModel


def _create_remote_store(settings: Settings) -> RemoteFavoritesStore | None:
    """Build the Firestore store; favorites stay local-only if it fails."""
    try:
        return FirestoreFavoritesStore.from_settings(settings)
    except Exception:
        logger.exception("Failed to initialize Firestore - favorites stay local only")
        return None


def create_container(settings: Settings | None = None) -> Container:
    """Build the object graph. No I/O is performed here except Firebase setup."""
    settings = settings or get_settings()
    preview = settings.app.preview_mode

    recipe_client = SpoonacularClient.from_settings(settings)

    identity: FirebaseIdentityProvider | PreviewIdentityProvider
    local_store: LocalKeyValueStore
    remote_store: RemoteFavoritesStore | None
    if preview:
        identity = PreviewIdentityProvider()
        local_store = MemoryKeyValueStore()
        remote_store = None
    else:
        identity = FirebaseIdentityProvider.from_settings(settings)
        local_store = FileKeyValueStore(settings.favorites.local_store_dir)
        remote_store = _create_remote_store(settings)

    favorites = FavoritesSyncEngine(
        identity,
        local_store,
        remote_store,
        storage_key=settings.favorites.storage_key,
        preview_mode=preview,
    )

    featured_cfg = settings.spoonacular.featured
    return Container(
        settings=settings,
        recipe_client=recipe_client,
        identity=identity,
        local_store=local_store,
        remote_store=remote_store,
        favorites=favorites,
        featured=FeaturedRecipesViewModel(
            recipe_client,
            fallback_ingredients=featured_cfg.fallback_ingredients,
            fallback_number=featured_cfg.fallback_number,
        ),
        search=RecipeSearchViewModel(
            recipe_client,
            result_number=settings.spoonacular.search.view_number,
        ),
        detail=RecipeDetailViewModel(recipe_client, favorites),
        auth=AuthViewModel(identity),
    )


async def _startup(container: Container) -> None:
    settings = container.settings
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        preview_mode=settings.app.preview_mode,
    )

    if not settings.SPOONACULAR_API_KEY:
        logger.warning("SPOONACULAR_API_KEY is not set - recipe requests will fail")

    await container.recipe_client.initialize()
    await container.identity.initialize()
    await container.favorites.start()

    logger.info("Application startup complete")


async def _shutdown(container: Container) -> None:
    logger.info("Shutting down application")

    container.auth.close()
    await container.favorites.close()
    await container.identity.shutdown()
    await container.recipe_client.shutdown()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(settings: Settings | None = None) -> AsyncGenerator[Container]:
    """Run the application for the duration of the ``async with`` block.

    Example:
        ```python
        async with lifespan() as app:
            await app.featured.load()
        ```
    """
    settings = settings or get_settings()
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
        log_file=settings.logging.file,
    )

    container = create_container(settings)
    try:
        await _startup(container)
        yield container
    finally:
        await _shutdown(container)
