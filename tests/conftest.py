"""Shared test fixtures and configuration for the Forkly tests.

The test environment is selected before any application module is imported
so the module-level settings load ``config/environments/test``.
"""

from __future__ import annotations

import os


os.environ.setdefault("APP_ENV", "test")

from collections.abc import Callable  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from loguru import logger  # noqa: E402

from forkly.auth.base import IdentitySignal  # noqa: E402
from forkly.auth.models import AuthUser  # noqa: E402
from forkly.clients.spoonacular.client import SpoonacularClient  # noqa: E402
from forkly.core.config import get_settings  # noqa: E402
from forkly.favorites.local_store import MemoryKeyValueStore  # noqa: E402
from forkly.observability.logging import clear_context  # noqa: E402
from forkly.schemas.recipe import Recipe  # noqa: E402


class FakeIdentity(IdentitySignal):
    """Identity signal whose user is switched directly by the test."""

    async def sign_up(self, email: str, password: str) -> AuthUser:
        user = AuthUser(uid=f"uid-{email}", email=email)
        self._set_user(user)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        return await self.sign_up(email, password)

    def sign_out(self) -> None:
        self._set_user(None)

    def set_user(self, user: AuthUser | None) -> None:
        self._set_user(user)


@pytest.fixture(autouse=True)
def _reset_logging_context():
    """Keep bound log context from leaking between tests."""
    clear_context()
    yield
    clear_context()


@pytest.fixture
def log_messages():
    """Collect every Loguru record emitted during the test."""
    records: list[dict] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)


@pytest.fixture
def settings():
    """Fresh settings for the test environment."""
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def mock_recipe_client() -> AsyncMock:
    """Recipe API client double with every operation as an AsyncMock."""
    return AsyncMock(spec=SpoonacularClient)


@pytest.fixture
def make_recipe() -> Callable[..., Recipe]:
    def _make(recipe_id: int, title: str | None = None, **fields) -> Recipe:
        return Recipe(id=recipe_id, title=title or f"Recipe {recipe_id}", **fields)

    return _make
