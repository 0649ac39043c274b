"""Remote per-user favorites collection backed by Cloud Firestore.

Layout: ``{collection}/{user_id}/{subcollection}/{recipe_id}``, one document
per favorite whose body is the recipe's JSON object.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.api_core.exceptions import GoogleAPIError
from pydantic import ValidationError

from forkly.favorites.exceptions import RemoteStoreError
from forkly.observability.logging import get_logger
from forkly.schemas.recipe import Recipe


if TYPE_CHECKING:
    from forkly.core.config import Settings


logger = get_logger(__name__)


@runtime_checkable
class RemoteFavoritesStore(Protocol):
    """A per-user favorites collection reachable only with an identity."""

    async def load(self, user_id: str) -> list[Recipe]:
        """Read every favorite of ``user_id``.

        Raises:
            RemoteStoreError: If the collection cannot be read.
        """
        ...

    async def replace_all(self, user_id: str, recipes: Sequence[Recipe]) -> None:
        """Make the collection mirror ``recipes`` in one atomic write.

        Raises:
            RemoteStoreError: If the batch cannot be committed.
        """
        ...


def get_firebase_app(settings: Settings) -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    cfg = settings.firebase
    if cfg.credentials_path:
        cred: Any = credentials.Certificate(cfg.credentials_path)
    else:
        cred = credentials.ApplicationDefault()
    options = {"projectId": cfg.project_id} if cfg.project_id else None
    logger.info("Initializing Firebase app", project_id=cfg.project_id)
    return firebase_admin.initialize_app(cred, options)


class FirestoreFavoritesStore:
    """Favorites mirror stored in Firestore.

    Args:
        client: A ``google.cloud.firestore.AsyncClient``.
        collection: Top-level users collection name.
        subcollection: Per-user favorites collection name.
    """

    def __init__(
        self,
        client: Any,
        collection: str = "users",
        subcollection: str = "favorites",
    ) -> None:
        self._client = client
        self.collection = collection
        self.subcollection = subcollection

    @classmethod
    def from_settings(cls, settings: Settings) -> FirestoreFavoritesStore:
        app = get_firebase_app(settings)
        return cls(
            client=firestore_async.client(app),
            collection=settings.favorites.remote_collection,
            subcollection=settings.favorites.remote_subcollection,
        )

    def _favorites(self, user_id: str) -> Any:
        return (
            self._client.collection(self.collection)
            .document(user_id)
            .collection(self.subcollection)
        )

    async def load(self, user_id: str) -> list[Recipe]:
        recipes: list[Recipe] = []
        try:
            async for snapshot in self._favorites(user_id).stream():
                data = snapshot.to_dict() or {}
                try:
                    recipes.append(Recipe.model_validate(data))
                except ValidationError:
                    logger.warning(
                        "Skipping unreadable favorite document",
                        user_id=user_id,
                        document_id=snapshot.id,
                    )
        except GoogleAPIError as e:
            logger.warning(
                "Failed to load remote favorites",
                user_id=user_id,
                error=str(e),
            )
            msg = f"Failed to load favorites: {e}"
            raise RemoteStoreError(msg) from e

        logger.debug("Loaded remote favorites", user_id=user_id, count=len(recipes))
        return recipes

    async def replace_all(self, user_id: str, recipes: Sequence[Recipe]) -> None:
        favorites = self._favorites(user_id)
        keep = {str(recipe.id) for recipe in recipes}
        try:
            batch = self._client.batch()
            # Documents that are about to be set are overwritten, not deleted.
            async for doc_ref in favorites.list_documents():
                if doc_ref.id not in keep:
                    batch.delete(doc_ref)
            for recipe in recipes:
                batch.set(favorites.document(str(recipe.id)), recipe.to_document())
            await batch.commit()
        except GoogleAPIError as e:
            logger.warning(
                "Failed to write remote favorites",
                user_id=user_id,
                error=str(e),
            )
            msg = f"Failed to save favorites: {e}"
            raise RemoteStoreError(msg) from e

        logger.debug("Replaced remote favorites", user_id=user_id, count=len(recipes))
