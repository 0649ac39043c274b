"""Recipe API client protocol definition.

View models depend on this interface only, so tests and previews can swap
in fakes for the HTTP client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from forkly.clients.spoonacular.client import ApiKeyStatus
    from forkly.schemas.recipe import Recipe, RecipeDetail, SearchCriteria


@runtime_checkable
class RecipeAPIClientProtocol(Protocol):
    """Protocol for recipe API client implementations.

    Every method raises a ``RecipeAPIError`` subclass on failure:
    - InvalidRequestError: request could not be built (no I/O done)
    - NetworkError: transport failure or timeout
    - ServerError: non-2xx status
    - DecodeError / NoDataError: unusable 2xx body
    """

    async def initialize(self) -> None:
        """Initialize client resources (HTTP connections, etc.)."""
        ...

    async def shutdown(self) -> None:
        """Release client resources."""
        ...

    async def search(self, criteria: SearchCriteria) -> list[Recipe]:
        """Search recipes. Results keep the server's order."""
        ...

    async def get_details(self, recipe_id: int) -> RecipeDetail:
        """Fetch the full detail of one recipe."""
        ...

    async def fetch_featured(self, *, force_refresh: bool = False) -> list[Recipe]:
        """Return featured recipes, served from cache while fresh."""
        ...

    async def find_by_ingredients(
        self,
        ingredients: list[str],
        *,
        number: int = 10,
        limit_license: bool = True,
        ranking: int = 1,
        ignore_pantry: bool = False,
    ) -> list[Recipe]:
        """Find recipes that use the given ingredients."""
        ...

    async def check_api_key(self) -> ApiKeyStatus:
        """Call the API to report whether the configured key works."""
        ...
