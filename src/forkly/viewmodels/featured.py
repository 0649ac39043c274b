"""Featured recipes for the home surface."""

from __future__ import annotations

from typing import TYPE_CHECKING

from forkly.clients.spoonacular.exceptions import RecipeAPIError
from forkly.observability.logging import get_logger
from forkly.viewmodels.base import ViewModel


if TYPE_CHECKING:
    from forkly.clients.spoonacular.protocol import RecipeAPIClientProtocol
    from forkly.schemas.recipe import Recipe


logger = get_logger(__name__)

DEFAULT_FALLBACK_INGREDIENTS = ("carrot", "tomato", "potato", "chicken", "beef", "pasta")


class FeaturedRecipesViewModel(ViewModel):
    """Loads the featured list, falling back to an ingredient search.

    The random endpoint is tried first. On any client error the view model
    retries once with ``find_by_ingredients`` over a fixed ingredient list,
    and only reports an error if that fails too.
    """

    def __init__(
        self,
        client: RecipeAPIClientProtocol,
        *,
        fallback_ingredients: tuple[str, ...] | list[str] = DEFAULT_FALLBACK_INGREDIENTS,
        fallback_number: int = 10,
    ) -> None:
        super().__init__()
        self._client = client
        self.fallback_ingredients = tuple(fallback_ingredients)
        self.fallback_number = fallback_number
        self.recipes: list[Recipe] = []

    async def load(self, *, force_refresh: bool = False) -> None:
        generation = self._next_generation()
        self._update(is_loading=True, error_message=None)

        try:
            recipes = await self._client.fetch_featured(force_refresh=force_refresh)
        except RecipeAPIError as primary:
            logger.warning(
                "Featured endpoint failed, trying ingredient search",
                error_type=type(primary).__name__,
                error=str(primary),
            )
            try:
                recipes = await self._client.find_by_ingredients(
                    list(self.fallback_ingredients),
                    number=self.fallback_number,
                    limit_license=True,
                    ranking=1,
                    ignore_pantry=False,
                )
            except RecipeAPIError as e:
                logger.error(
                    "Both featured endpoints failed",
                    error_type=type(e).__name__,
                    reason=getattr(e, "reason", None),
                )
                if self._is_current(generation):
                    self._update(is_loading=False, error_message=e.user_message)
                return

        if not self._is_current(generation):
            return
        logger.debug("Featured recipes loaded", count=len(recipes))
        self._update(is_loading=False, recipes=recipes)

    async def retry(self) -> None:
        """Reload, bypassing the featured cache."""
        await self.load(force_refresh=True)
