"""Recipe search with advanced filters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from forkly.clients.spoonacular.exceptions import RecipeAPIError
from forkly.observability.logging import get_logger
from forkly.schemas.recipe import SearchCriteria
from forkly.viewmodels.base import ViewModel


if TYPE_CHECKING:
    from forkly.clients.spoonacular.protocol import RecipeAPIClientProtocol
    from forkly.schemas.recipe import Recipe


logger = get_logger(__name__)

NO_INGREDIENT_MATCHES = "No recipes found with these ingredients."
NO_CRITERIA_MATCHES = "No recipes found matching your criteria."

CUISINES = (
    "African", "American", "British", "Cajun", "Caribbean", "Chinese",
    "Eastern European", "European", "French", "German", "Greek", "Indian",
    "Irish", "Italian", "Japanese", "Jewish", "Korean", "Latin American",
    "Mediterranean", "Mexican", "Middle Eastern", "Nordic", "Southern",
    "Spanish", "Thai", "Vietnamese",
)  # fmt: skip

DIETS = (
    "Gluten Free", "Ketogenic", "Vegetarian", "Lacto-Vegetarian",
    "Ovo-Vegetarian", "Vegan", "Pescetarian", "Paleo", "Primal", "Low FODMAP",
    "Whole30",
)  # fmt: skip

INTOLERANCES = (
    "Dairy", "Egg", "Gluten", "Grain", "Peanut", "Seafood", "Sesame",
    "Shellfish", "Soy", "Sulfite", "Tree Nut", "Wheat",
)  # fmt: skip

MEAL_TYPES = (
    "Main Course", "Side Dish", "Dessert", "Appetizer", "Salad", "Bread",
    "Breakfast", "Soup", "Beverage", "Sauce", "Marinade", "Fingerfood",
    "Snack", "Drink",
)  # fmt: skip

SORT_OPTIONS = (
    "popularity", "healthiness", "price", "time", "random",
    "max-used-ingredients", "min-missing-ingredients", "alcohol", "caffeine",
    "copper", "energy", "calories", "calcium", "carbohydrates", "carbs",
    "cholesterol", "choline", "fat", "fluoride", "fiber", "folate",
)  # fmt: skip


class RecipeSearchViewModel(ViewModel):
    """Holds the query, filters and results of the search screen.

    Each ``search`` call supersedes the previous one: a response that
    arrives after a newer search has started is ignored.
    """

    available_cuisines = CUISINES
    available_diets = DIETS
    available_intolerances = INTOLERANCES
    available_meal_types = MEAL_TYPES
    available_sort_options = SORT_OPTIONS

    def __init__(self, client: RecipeAPIClientProtocol, *, result_number: int = 20) -> None:
        super().__init__()
        self._client = client
        self.result_number = result_number
        self.query = ""
        self.results: list[Recipe] = []
        self.show_advanced_options = False
        self.reset_filters()

    def reset_filters(self) -> None:
        """Clear every filter; the query and results are kept."""
        self.cuisine: str | None = None
        self.diet: str | None = None
        self.intolerances: str | None = None
        self.meal_type: str | None = None
        self.include_ingredients: str | None = None
        self.exclude_ingredients: str | None = None
        self.max_ready_time: int | None = None
        self.sort: str | None = None
        self._notify()

    def criteria(self) -> SearchCriteria:
        """The current query and filters as search options."""
        return SearchCriteria(
            query=self.query.strip(),
            cuisine=self.cuisine,
            diet=self.diet,
            intolerances=self.intolerances,
            meal_type=self.meal_type,
            include_ingredients=self.include_ingredients or [],
            exclude_ingredients=self.exclude_ingredients or [],
            max_ready_time=self.max_ready_time,
            sort=self.sort,
            number=self.result_number,
            add_recipe_information=False,
        )

    async def search(self) -> None:
        generation = self._next_generation()
        criteria = self.criteria()

        if not criteria.query and not criteria.has_filters:
            self._update(results=[], error_message=None, is_loading=False)
            return

        self._update(is_loading=True, error_message=None)
        by_ingredients = not criteria.query and bool(criteria.include_ingredients)

        try:
            if by_ingredients:
                logger.debug(
                    "Searching by ingredients",
                    ingredients=criteria.include_ingredients,
                )
                recipes = await self._client.find_by_ingredients(
                    criteria.include_ingredients,
                    number=self.result_number,
                    limit_license=True,
                    ranking=1,
                    ignore_pantry=False,
                )
            else:
                logger.debug(
                    "Searching recipes",
                    query=criteria.query,
                    cuisine=criteria.cuisine,
                    diet=criteria.diet,
                )
                recipes = await self._client.search(criteria)
        except RecipeAPIError as e:
            if not self._is_current(generation):
                return
            self._update(is_loading=False, results=[], error_message=e.user_message)
            return

        if not self._is_current(generation):
            logger.debug("Ignoring superseded search results", generation=generation)
            return

        empty_message = NO_INGREDIENT_MATCHES if by_ingredients else NO_CRITERIA_MATCHES
        self._update(
            is_loading=False,
            results=recipes,
            error_message=None if recipes else empty_message,
        )
