"""Single recipe detail screen."""

from __future__ import annotations

from typing import TYPE_CHECKING

from forkly.clients.spoonacular.exceptions import RecipeAPIError
from forkly.observability.logging import get_logger
from forkly.utils.text import clean_html_tags, split_into_steps
from forkly.viewmodels.base import ViewModel


if TYPE_CHECKING:
    import asyncio

    from forkly.clients.spoonacular.protocol import RecipeAPIClientProtocol
    from forkly.favorites.engine import FavoritesSyncEngine
    from forkly.schemas.recipe import Recipe, RecipeDetail


logger = get_logger(__name__)


class RecipeDetailViewModel(ViewModel):
    """Loads one recipe and derives display text from it.

    A load is applied only if it is still the latest one and still targets
    the recipe currently requested.
    """

    def __init__(
        self,
        client: RecipeAPIClientProtocol,
        favorites: FavoritesSyncEngine | None = None,
    ) -> None:
        super().__init__()
        self._client = client
        self._favorites = favorites
        self.recipe_id: int | None = None
        self.detail: RecipeDetail | None = None

    async def load(self, recipe_id: int) -> None:
        generation = self._next_generation()
        self.recipe_id = recipe_id
        self._update(is_loading=True, error_message=None)

        try:
            detail = await self._client.get_details(recipe_id)
        except RecipeAPIError as e:
            if self._is_current(generation) and self.recipe_id == recipe_id:
                self._update(is_loading=False, error_message=e.user_message)
            return

        if not self._is_current(generation) or self.recipe_id != recipe_id:
            logger.debug("Ignoring superseded recipe detail", recipe_id=recipe_id)
            return
        self._update(is_loading=False, detail=detail)

    def cleaned_summary(self) -> str:
        if self.detail is None or not self.detail.summary:
            return ""
        return clean_html_tags(self.detail.summary)

    def cleaned_instructions(self) -> str:
        if self.detail is None or not self.detail.instructions:
            return ""
        return clean_html_tags(self.detail.instructions)

    def instruction_steps(self) -> list[str]:
        return split_into_steps(self.cleaned_instructions())

    def summary_recipe(self) -> Recipe | None:
        """The loaded recipe reduced to the summary stored in favorites."""
        if self.detail is None:
            return None
        return self.detail.to_recipe()

    @property
    def is_favorite(self) -> bool:
        recipe = self.summary_recipe()
        if recipe is None or self._favorites is None:
            return False
        return self._favorites.is_favorite(recipe)

    def toggle_favorite(self) -> asyncio.Task[bool] | None:
        """Toggle the loaded recipe in favorites. ``None`` if nothing is loaded."""
        recipe = self.summary_recipe()
        if recipe is None or self._favorites is None:
            return None
        task = self._favorites.toggle(recipe)
        self._notify()
        return task
