"""View models: observable screen state over the client, identity and favorites."""

from forkly.viewmodels.auth import AuthViewModel
from forkly.viewmodels.detail import RecipeDetailViewModel
from forkly.viewmodels.featured import FeaturedRecipesViewModel
from forkly.viewmodels.search import RecipeSearchViewModel


__all__ = [
    "AuthViewModel",
    "FeaturedRecipesViewModel",
    "RecipeDetailViewModel",
    "RecipeSearchViewModel",
]
