"""Spoonacular recipe API client."""

from forkly.clients.spoonacular.cache import CacheEntry, FeaturedCache
from forkly.clients.spoonacular.client import ApiKeyStatus, SpoonacularClient
from forkly.clients.spoonacular.exceptions import (
    ClientNotInitializedError,
    DecodeError,
    InvalidRequestError,
    NetworkError,
    NoDataError,
    RecipeAPIError,
    ServerError,
)
from forkly.clients.spoonacular.protocol import RecipeAPIClientProtocol


__all__ = [
    "ApiKeyStatus",
    "CacheEntry",
    "ClientNotInitializedError",
    "DecodeError",
    "FeaturedCache",
    "InvalidRequestError",
    "NetworkError",
    "NoDataError",
    "RecipeAPIClientProtocol",
    "RecipeAPIError",
    "ServerError",
    "SpoonacularClient",
]
