"""Recipe schemas.

Every enrichment field is optional: the recipe API fills in different fields
depending on the endpoint (search without ``addRecipeInformation`` returns
little more than id, title and image). Only ``id`` and ``title`` are
guaranteed.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from forkly.schemas.base import DomainModel, DownstreamResponse


def _split_csv(v: Any) -> Any:
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


class Recipe(DownstreamResponse):
    """Recipe summary as returned by search, random and ingredient endpoints.

    Two recipes are equal when their ids match, whatever else differs.
    """

    id: int = Field(..., description="Recipe API identifier")
    title: str = Field(..., description="Recipe title")
    image: str | None = Field(
        default=None,
        description="Remote image URL or the name of a bundled local image",
    )
    image_type: str | None = Field(default=None, description="Image file type")
    servings: int | None = Field(default=None, description="Number of servings")
    ready_in_minutes: int | None = Field(
        default=None, description="Total preparation time in minutes"
    )
    source_name: str | None = Field(default=None, description="Source attribution")
    source_url: str | None = Field(default=None, description="Original recipe URL")
    spoonacular_score: float | None = Field(default=None, description="API score")
    health_score: float | None = Field(default=None, description="Health score")
    price_per_serving: float | None = Field(
        default=None, description="Price per serving in US cents"
    )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Recipe):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_local_image(self) -> bool:
        """True when ``image`` names a bundled asset rather than a URL."""
        return self.image is not None and "http" not in self.image

    def to_document(self) -> dict[str, Any]:
        """JSON-compatible representation used by the favorites stores."""
        return self.model_dump(mode="json", by_alias=True)


class Ingredient(DownstreamResponse):
    """Ingredient line from the detail endpoint. Every field is optional."""

    id: int | None = None
    name: str | None = None
    amount: float | None = None
    unit: str | None = None
    original: str | None = Field(
        default=None, description="Ingredient line as written in the source"
    )


class RecipeDetail(Recipe):
    """Full recipe from the single-recipe information endpoint."""

    summary: str | None = Field(default=None, description="HTML summary")
    instructions: str | None = Field(
        default=None, description="Free text or HTML instructions"
    )
    dish_types: list[str] | None = None
    diets: list[str] | None = None
    occasions: list[str] | None = None
    extended_ingredients: list[Ingredient] | None = None

    def to_recipe(self) -> Recipe:
        """Summary view of this recipe, suitable for the favorites set."""
        return Recipe(id=self.id, title=self.title, image=self.image)


class RecipeSearchResponse(DownstreamResponse):
    """Envelope of the complex search endpoint."""

    results: list[Recipe]
    offset: int | None = None
    number: int | None = None
    total_results: int | None = None


class FeaturedRecipesResponse(DownstreamResponse):
    """Envelope of the random recipes endpoint."""

    recipes: list[Recipe]


class SearchCriteria(DomainModel):
    """Options for a recipe search.

    Only options with a value are sent; ``number`` is always sent.
    """

    query: str = ""
    cuisine: str | None = None
    diet: str | None = None
    intolerances: str | None = None
    meal_type: str | None = None
    include_ingredients: Annotated[list[str], BeforeValidator(_split_csv)] = Field(
        default_factory=list
    )
    exclude_ingredients: Annotated[list[str], BeforeValidator(_split_csv)] = Field(
        default_factory=list
    )
    max_ready_time: int | None = Field(default=None, ge=0)
    sort: str | None = None
    number: int = Field(default=10, ge=1, le=100)
    add_recipe_information: bool = False

    @property
    def has_filters(self) -> bool:
        """True when any option other than the free-text query is set."""
        return any(
            (
                self.cuisine,
                self.diet,
                self.intolerances,
                self.meal_type,
                self.include_ingredients,
                self.exclude_ingredients,
                self.max_ready_time is not None,
            )
        )

    def to_query_params(self) -> dict[str, str]:
        """Query parameters for the complex search endpoint."""
        params: dict[str, str] = {"number": str(self.number)}
        if self.query.strip():
            params["query"] = self.query
        optional = {
            "cuisine": self.cuisine,
            "diet": self.diet,
            "intolerances": self.intolerances,
            "type": self.meal_type,
            "sort": self.sort,
        }
        for name, value in optional.items():
            if value:
                params[name] = value
        if self.include_ingredients:
            params["includeIngredients"] = ",".join(self.include_ingredients)
        if self.exclude_ingredients:
            params["excludeIngredients"] = ",".join(self.exclude_ingredients)
        if self.max_ready_time is not None:
            params["maxReadyTime"] = str(self.max_ready_time)
        if self.add_recipe_information:
            params["addRecipeInformation"] = "true"
        return params
