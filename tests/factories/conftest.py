"""Factory configuration and exports.

This module exports all factories for convenient importing in tests.
"""

from tests.factories.recipe import IngredientFactory, RecipeDetailFactory, RecipeFactory


__all__ = [
    "IngredientFactory",
    "RecipeDetailFactory",
    "RecipeFactory",
]
