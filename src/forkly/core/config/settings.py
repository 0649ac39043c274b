"""Forkly settings: YAML files layered under environment variables.

Configuration is organized by concern:
- ``app``: identity and the preview/test-harness switch
- ``logging``: log level, format and optional file sink
- ``spoonacular``: recipe API endpoints, timeouts, rate and cache policy
- ``favorites``: local slot key and remote collection layout
- ``firebase``: identity provider and document store access

Secrets (API keys) are read from the environment or ``.env`` only.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


def parse_list(v: str | list[str]) -> list[str]:
    """Split a comma-separated string; lists pass through."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


class AppSettings(BaseModel):
    """Name, version and the preview switch."""

    name: str = "Forkly"
    version: str = "0.1.0"
    # Short-circuits every remote call (identity, document store).
    preview_mode: bool = False


class LoggingSettings(BaseModel):
    """Loguru sink options."""

    level: str = "INFO"
    format: str = "json"
    file: str | None = None


class FeaturedRecipesSettings(BaseModel):
    """Featured (home surface) recipe policy."""

    number: int = 5
    cache_ttl: float = 3600.0
    fallback_ingredients: Annotated[list[str], BeforeValidator(parse_list)] = Field(
        default_factory=lambda: [
            "carrot",
            "tomato",
            "potato",
            "chicken",
            "beef",
            "pasta",
        ]
    )
    fallback_number: int = 10


class SearchSettings(BaseModel):
    """Recipe search defaults."""

    default_number: int = 10
    view_number: int = 20


class SpoonacularSettings(BaseModel):
    """Spoonacular recipe API client configuration."""

    base_url: str = "https://api.spoonacular.com"
    request_timeout: float = 90.0
    resource_timeout: float = 180.0
    requests_per_minute: float = 60.0
    api_key_visible_chars: int = 5
    featured: FeaturedRecipesSettings = FeaturedRecipesSettings()
    search: SearchSettings = SearchSettings()


class FavoritesSettings(BaseModel):
    """Favorites storage layout."""

    storage_key: str = "favoriteRecipes"
    local_store_dir: str = "~/.forkly/store"
    remote_collection: str = "users"
    remote_subcollection: str = "favorites"


class FirebaseSettings(BaseModel):
    """Firebase identity and document store settings."""

    project_id: str | None = None
    credentials_path: str | None = None
    identity_base_url: str = "https://identitytoolkit.googleapis.com/v1"
    timeout: float = 30.0


class Settings(BaseSettings):
    """Every configurable value of the app.

    Sources, strongest first: ``Settings(...)`` arguments, environment
    variables (nested with ``__``, e.g. ``APP__PREVIEW_MODE=true``), ``.env``,
    ``config/base`` YAML overlaid by ``config/environments/{APP_ENV}``, and
    finally the defaults above.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    logging: LoggingSettings = LoggingSettings()
    spoonacular: SpoonacularSettings = SpoonacularSettings()
    favorites: FavoritesSettings = FavoritesSettings()
    firebase: FirebaseSettings = FirebaseSettings()

    # Never put these in YAML.
    SPOONACULAR_API_KEY: str = ""
    FIREBASE_WEB_API_KEY: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def is_development(self) -> bool:
        """Text logs and developer defaults."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_testing(self) -> bool:
        return self.APP_ENV == "test"

    @property
    def remote_enabled(self) -> bool:
        """Whether remote identity and storage may be contacted."""
        return not self.app.preview_mode


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, built once."""
    return Settings()


settings = get_settings()
