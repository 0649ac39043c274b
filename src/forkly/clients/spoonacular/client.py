"""HTTP client for the Spoonacular recipe API.

The upstream API is rate limited, occasionally slow and loose about which
fields it returns. This client:
- builds every request against a configurable base URL
- authenticates with the API key as both query parameter and header
- bounds each request by a resource timeout and maps timeouts to NetworkError
- decodes bodies with pydantic, reporting the offending path on drift
- caches the featured (random) recipe list for a fixed window
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
import orjson
from aiolimiter import AsyncLimiter
from pydantic import TypeAdapter, ValidationError

from forkly.clients.spoonacular.cache import FeaturedCache
from forkly.clients.spoonacular.exceptions import (
    ClientNotInitializedError,
    DecodeError,
    InvalidRequestError,
    NetworkError,
    NoDataError,
    RecipeAPIError,
    ServerError,
)
from forkly.observability.logging import get_logger, mask_secret
from forkly.schemas.recipe import (
    FeaturedRecipesResponse,
    Recipe,
    RecipeDetail,
    RecipeSearchResponse,
)


if TYPE_CHECKING:
    from forkly.core.config import Settings
    from forkly.schemas.recipe import SearchCriteria


logger = get_logger(__name__)

_RECIPE_LIST = TypeAdapter(list[Recipe])

# Known-good recipe fetched to check the API key.
API_KEY_CHECK_RECIPE_ID = 715538


@dataclass(frozen=True)
class ApiKeyStatus:
    """Outcome of probing the recipe API with the configured key."""

    valid: bool
    message: str
    status_code: int | None = None


def _format_loc(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as ``results[0].title``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "$"


def _lookup(data: Any, loc: tuple[int | str, ...]) -> Any:
    current = data
    for part in loc:
        try:
            current = current[part]
        except (KeyError, IndexError, TypeError):
            return None
    return current


def _decode_error_from(exc: ValidationError, data: Any) -> DecodeError:
    error = exc.errors()[0]
    loc = tuple(error["loc"])
    if error["type"] == "missing":
        actual = "missing"
    else:
        actual = type(_lookup(data, loc)).__name__
    return DecodeError(path=_format_loc(loc), expected=error["msg"], actual=actual)


class SpoonacularClient:
    """Async HTTP client for the Spoonacular recipe API.

    Example:
        ```python
        client = SpoonacularClient(api_key="...")
        await client.initialize()

        recipes = await client.search(SearchCriteria(query="pasta"))

        await client.shutdown()
        ```

    An ``http_client`` passed in is used as-is and is never closed by this
    class. ``clock`` supplies the time used for cache age (seconds, any
    monotonic origin).
    """

    DEFAULT_BASE_URL = "https://api.spoonacular.com"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout: float = 90.0,
        resource_timeout: float = 180.0,
        requests_per_minute: float = 60.0,
        featured_cache_ttl: float = 3600.0,
        featured_number: int = 5,
        api_key_visible_chars: int = 5,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.resource_timeout = resource_timeout
        self.featured_number = featured_number
        self.api_key_visible_chars = api_key_visible_chars
        self.featured_cache = FeaturedCache(ttl=featured_cache_ttl)
        self._clock = clock
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._rate_limiter = AsyncLimiter(1, 60.0 / requests_per_minute)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> SpoonacularClient:
        """Build a client from the ``spoonacular`` settings section."""
        cfg = settings.spoonacular
        return cls(
            api_key=settings.SPOONACULAR_API_KEY,
            base_url=cfg.base_url,
            request_timeout=cfg.request_timeout,
            resource_timeout=cfg.resource_timeout,
            requests_per_minute=cfg.requests_per_minute,
            featured_cache_ttl=cfg.featured.cache_ttl,
            featured_number=cfg.featured.number,
            api_key_visible_chars=cfg.api_key_visible_chars,
            http_client=http_client,
        )

    @property
    def masked_api_key(self) -> str:
        """The API key with everything past the first few characters hidden."""
        return mask_secret(self.api_key, self.api_key_visible_chars)

    async def initialize(self) -> None:
        """Create the HTTP client unless one was injected."""
        if self._http_client is not None:
            return

        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.request_timeout),
            headers={"Accept": "application/json"},
            limits=httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
            ),
        )
        self._owns_http_client = True
        logger.info(
            "SpoonacularClient initialized",
            base_url=self.base_url,
            api_key=self.masked_api_key,
            request_timeout=self.request_timeout,
        )

    async def shutdown(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("SpoonacularClient shutdown")

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def search(self, criteria: SearchCriteria) -> list[Recipe]:
        """Search recipes via ``/recipes/complexSearch``.

        Returns:
            The decoded ``results`` array, in server order.

        Raises:
            InvalidRequestError: If the request URL cannot be built.
            NetworkError: On transport failure or timeout.
            ServerError: On a non-2xx response.
            DecodeError: If the body does not match the expected shape.
            NoDataError: If the body is empty.
        """
        content = await self._get("/recipes/complexSearch", criteria.to_query_params())
        recipes = self._decode_recipes(content, RecipeSearchResponse, "results")
        logger.debug("Search completed", query=criteria.query, results=len(recipes))
        return recipes

    async def get_details(self, recipe_id: int) -> RecipeDetail:
        """Fetch one recipe via ``/recipes/{id}/information`` without nutrition."""
        content = await self._get(
            f"/recipes/{recipe_id}/information",
            {"includeNutrition": "false"},
        )
        data = self._parse_json(content)
        if not isinstance(data, dict):
            raise DecodeError(path="$", expected="object", actual=type(data).__name__)
        try:
            return RecipeDetail.model_validate(data)
        except ValidationError as e:
            raise _decode_error_from(e, data) from e

    async def fetch_featured(self, *, force_refresh: bool = False) -> list[Recipe]:
        """Return featured recipes from ``/recipes/random``.

        Served from the cache while it is fresh unless ``force_refresh`` is
        set. The cache is replaced only after a successful fetch, so a
        failing refresh leaves the previous entry intact.
        """
        if not force_refresh:
            cached = self.featured_cache.get(self._clock())
            if cached is not None:
                logger.debug("Featured recipes served from cache", count=len(cached))
                return cached

        content = await self._get(
            "/recipes/random",
            {
                "number": str(self.featured_number),
                "sort": "random",
                "addRecipeInformation": "true",
            },
        )
        recipes = self._decode_recipes(content, FeaturedRecipesResponse, "recipes")
        self.featured_cache.store(recipes, self._clock())
        logger.info(
            "Featured recipes refreshed",
            count=len(recipes),
            forced=force_refresh,
        )
        return list(recipes)

    async def find_by_ingredients(
        self,
        ingredients: list[str],
        *,
        number: int = 10,
        limit_license: bool = True,
        ranking: int = 1,
        ignore_pantry: bool = False,
    ) -> list[Recipe]:
        """Find recipes via ``/recipes/findByIngredients``.

        The endpoint answers with a bare JSON array rather than an object.
        """
        params = {
            "ingredients": ",".join(ingredients),
            "number": str(number),
            "limitLicense": "true" if limit_license else "false",
            "ranking": str(ranking),
            "ignorePantry": "true" if ignore_pantry else "false",
        }
        content = await self._get("/recipes/findByIngredients", params)
        recipes = self._decode_recipes(content, None, None)
        logger.debug(
            "Find by ingredients completed",
            ingredients=params["ingredients"],
            results=len(recipes),
        )
        return recipes

    async def check_api_key(self) -> ApiKeyStatus:
        """Fetch the detail endpoint of a known recipe with the current key.

        Never raises for API failures; the outcome is described in the
        returned status.
        """
        if not self.api_key:
            return ApiKeyStatus(valid=False, message="No API key configured.")

        try:
            await self._get(
                f"/recipes/{API_KEY_CHECK_RECIPE_ID}/information",
                {"includeNutrition": "false"},
            )
        except ServerError as e:
            if e.reason == "invalid_credentials":
                message = "API key is invalid or unauthorized."
            else:
                message = f"API key check failed with HTTP {e.status_code}."
            logger.warning(
                "API key check failed",
                api_key=self.masked_api_key,
                status_code=e.status_code,
            )
            return ApiKeyStatus(valid=False, message=message, status_code=e.status_code)
        except NoDataError:
            return ApiKeyStatus(valid=True, message="API key is valid.", status_code=200)
        except RecipeAPIError as e:
            logger.warning("API key check could not complete", error=str(e))
            return ApiKeyStatus(valid=False, message=e.user_message)

        logger.info("API key check passed", api_key=self.masked_api_key)
        return ApiKeyStatus(valid=True, message="API key is valid.", status_code=200)

    # -------------------------------------------------------------------------
    # Request plumbing
    # -------------------------------------------------------------------------

    def _build_url(self, path: str) -> httpx.URL:
        raw = f"{self.base_url}{path}"
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL as e:
            msg = f"Invalid recipe API URL: {raw}"
            raise InvalidRequestError(msg) from e
        if url.scheme not in ("http", "https") or not url.host:
            msg = f"Invalid recipe API URL: {raw}"
            raise InvalidRequestError(msg)
        return url

    async def _get(self, path: str, params: Mapping[str, str]) -> bytes:
        url = self._build_url(path)
        if self._http_client is None:
            raise ClientNotInitializedError

        query = {**params, "apiKey": self.api_key}
        headers = {"Accept": "application/json", "x-api-key": self.api_key}

        logger.debug(
            "Recipe API request",
            url=str(url),
            params=dict(params),
            api_key=self.masked_api_key,
        )

        async with self._rate_limiter:
            try:
                async with asyncio.timeout(self.resource_timeout):
                    response = await self._http_client.get(
                        url, params=query, headers=headers
                    )
            except (TimeoutError, httpx.TimeoutException) as e:
                logger.warning("Recipe API request timed out", url=str(url))
                msg = f"Request to {url} timed out"
                raise NetworkError(msg) from e
            except httpx.RequestError as e:
                logger.warning(
                    "Failed to connect to recipe API",
                    url=str(url),
                    error=type(e).__name__,
                )
                msg = f"Failed to connect to recipe API: {type(e).__name__}"
                raise NetworkError(msg) from e

        if not response.is_success:
            error = ServerError(response.status_code, response.text)
            logger.warning(
                "Recipe API returned error",
                url=str(url),
                status_code=response.status_code,
                reason=error.reason,
            )
            raise error

        if not response.content.strip():
            raise NoDataError

        return response.content

    @staticmethod
    def _parse_json(content: bytes) -> Any:
        try:
            return orjson.loads(content)
        except orjson.JSONDecodeError as e:
            raise DecodeError(path="$", expected="valid JSON", actual=str(e)) from e

    def _decode_recipes(
        self,
        content: bytes,
        envelope: type[RecipeSearchResponse] | type[FeaturedRecipesResponse] | None,
        field: str | None,
    ) -> list[Recipe]:
        """Decode a recipe list from either a wrapped object or a bare array."""
        data = self._parse_json(content)
        try:
            if isinstance(data, list):
                return _RECIPE_LIST.validate_python(data)
            if isinstance(data, dict) and envelope is not None and field is not None:
                return list(getattr(envelope.model_validate(data), field))
        except ValidationError as e:
            raise _decode_error_from(e, data) from e

        expected = "object" if envelope is not None else "array"
        raise DecodeError(path="$", expected=expected, actual=type(data).__name__)
