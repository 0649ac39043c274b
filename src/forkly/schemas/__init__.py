"""Pydantic schemas for recipe data and search options."""

from forkly.schemas.base import DomainModel, DownstreamResponse
from forkly.schemas.recipe import (
    FeaturedRecipesResponse,
    Ingredient,
    Recipe,
    RecipeDetail,
    RecipeSearchResponse,
    SearchCriteria,
)


__all__ = [
    "DomainModel",
    "DownstreamResponse",
    "FeaturedRecipesResponse",
    "Ingredient",
    "Recipe",
    "RecipeDetail",
    "RecipeSearchResponse",
    "SearchCriteria",
]
