"""Unit tests for FeaturedRecipesViewModel."""

from __future__ import annotations

import asyncio

import pytest

from forkly.clients.spoonacular.exceptions import NetworkError, ServerError
from forkly.viewmodels.featured import (
    DEFAULT_FALLBACK_INGREDIENTS,
    FeaturedRecipesViewModel,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def viewmodel(mock_recipe_client) -> FeaturedRecipesViewModel:
    return FeaturedRecipesViewModel(mock_recipe_client)


class TestLoad:
    """Tests for FeaturedRecipesViewModel.load."""

    async def test_uses_featured_endpoint(self, viewmodel, mock_recipe_client, make_recipe):
        """Should show the featured recipes when the endpoint succeeds."""
        recipes = [make_recipe(1), make_recipe(2)]
        mock_recipe_client.fetch_featured.return_value = recipes

        await viewmodel.load()

        assert viewmodel.recipes == recipes
        assert viewmodel.is_loading is False
        assert viewmodel.error_message is None
        mock_recipe_client.fetch_featured.assert_awaited_once_with(force_refresh=False)
        mock_recipe_client.find_by_ingredients.assert_not_called()

    async def test_falls_back_to_ingredient_search(
        self, viewmodel, mock_recipe_client, make_recipe
    ):
        """Should try the ingredient search when the featured endpoint fails."""
        mock_recipe_client.fetch_featured.side_effect = ServerError(402)
        mock_recipe_client.find_by_ingredients.return_value = [make_recipe(9)]

        await viewmodel.load()

        assert [r.id for r in viewmodel.recipes] == [9]
        assert viewmodel.error_message is None
        mock_recipe_client.find_by_ingredients.assert_awaited_once_with(
            list(DEFAULT_FALLBACK_INGREDIENTS),
            number=10,
            limit_license=True,
            ranking=1,
            ignore_pantry=False,
        )

    async def test_reports_error_when_both_fail(self, viewmodel, mock_recipe_client):
        """Should surface the fallback error and keep the previous list."""
        mock_recipe_client.fetch_featured.side_effect = ServerError(500)
        mock_recipe_client.find_by_ingredients.side_effect = NetworkError("offline")

        await viewmodel.load()

        assert viewmodel.recipes == []
        assert viewmodel.is_loading is False
        assert viewmodel.error_message == NetworkError("offline").user_message

    async def test_retry_forces_refresh(self, viewmodel, mock_recipe_client):
        """Should bypass the featured cache on retry."""
        mock_recipe_client.fetch_featured.return_value = []

        await viewmodel.retry()

        mock_recipe_client.fetch_featured.assert_awaited_once_with(force_refresh=True)

    async def test_configured_fallback(self, mock_recipe_client):
        """Should use the configured ingredient list and count."""
        viewmodel = FeaturedRecipesViewModel(
            mock_recipe_client, fallback_ingredients=["rice"], fallback_number=3
        )
        mock_recipe_client.fetch_featured.side_effect = NetworkError("offline")
        mock_recipe_client.find_by_ingredients.return_value = []

        await viewmodel.load()

        args, kwargs = mock_recipe_client.find_by_ingredients.call_args
        assert args == (["rice"],)
        assert kwargs["number"] == 3

    async def test_notifies_loading_then_result(
        self, viewmodel, mock_recipe_client, make_recipe
    ):
        """Should notify when loading starts and when it ends."""
        mock_recipe_client.fetch_featured.return_value = [make_recipe(1)]
        states: list[bool] = []
        viewmodel.subscribe(lambda vm: states.append(vm.is_loading))

        await viewmodel.load()

        assert states == [True, False]

    async def test_superseded_load_is_ignored(
        self, viewmodel, mock_recipe_client, make_recipe
    ):
        """Should keep the newest load's result when an older one finishes last."""
        gate = asyncio.Event()
        calls = 0

        async def fetch(*, force_refresh: bool):
            nonlocal calls
            calls += 1
            if calls == 1:
                await gate.wait()
                return [make_recipe(1)]
            return [make_recipe(2)]

        mock_recipe_client.fetch_featured.side_effect = fetch

        slow = asyncio.create_task(viewmodel.load())
        await asyncio.sleep(0)
        await viewmodel.load(force_refresh=True)
        gate.set()
        await slow

        assert [r.id for r in viewmodel.recipes] == [2]
