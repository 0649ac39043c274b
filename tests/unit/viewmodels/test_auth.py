"""Unit tests for AuthViewModel."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from forkly.auth.exceptions import IdentityError
from forkly.auth.models import AuthUser
from forkly.viewmodels.auth import AuthViewModel


pytestmark = pytest.mark.unit


@pytest.fixture
def viewmodel(identity) -> AuthViewModel:
    return AuthViewModel(identity)


class TestSignIn:
    """Tests for sign-in and sign-up."""

    async def test_sign_in_success(self, viewmodel, identity):
        """Should sign in with a trimmed email."""
        assert viewmodel.is_authenticated is False

        ok = await viewmodel.sign_in("  cook@example.com ", "secret")

        assert ok is True
        assert viewmodel.is_authenticated is True
        assert viewmodel.current_user == AuthUser(
            uid="uid-cook@example.com", email="cook@example.com"
        )
        assert viewmodel.error_message is None
        assert viewmodel.is_loading is False

    async def test_sign_up_success(self, viewmodel):
        """Should sign up and become authenticated."""
        assert await viewmodel.sign_up("new@example.com", "secret") is True
        assert viewmodel.is_authenticated is True

    async def test_failure_shows_provider_message(self, viewmodel, identity):
        """Should show the provider's message unchanged."""
        message = "The password is invalid or the user does not have a password."
        identity.sign_in = AsyncMock(side_effect=IdentityError(message, "INVALID_PASSWORD"))

        ok = await viewmodel.sign_in("cook@example.com", "wrong")

        assert ok is False
        assert viewmodel.error_message == message
        assert viewmodel.is_authenticated is False
        assert viewmodel.is_loading is False

    async def test_success_clears_previous_error(self, viewmodel, identity):
        """Should clear a stale error on the next attempt."""
        viewmodel.error_message = "old"

        await viewmodel.sign_in("cook@example.com", "secret")

        assert viewmodel.error_message is None


class TestSignOut:
    """Tests for sign-out and identity following."""

    async def test_sign_out(self, viewmodel):
        """Should drop the identity."""
        await viewmodel.sign_in("cook@example.com", "secret")

        assert viewmodel.sign_out() is True
        assert viewmodel.is_authenticated is False

    def test_sign_out_failure(self, viewmodel, identity):
        """Should report a failed sign-out."""
        identity.sign_out = MagicMock(side_effect=IdentityError("Sign out failed"))

        assert viewmodel.sign_out() is False
        assert viewmodel.error_message == "Sign out failed"

    def test_notifies_on_identity_change(self, viewmodel, identity):
        """Should notify subscribers when the identity changes elsewhere."""
        calls: list[bool] = []
        viewmodel.subscribe(lambda vm: calls.append(vm.is_authenticated))

        identity.set_user(AuthUser(uid="u1"))

        assert calls == [True]

    def test_close_unsubscribes(self, viewmodel, identity):
        """Should stop following the identity after close."""
        calls: list[bool] = []
        viewmodel.subscribe(lambda vm: calls.append(vm.is_authenticated))
        viewmodel.close()

        identity.set_user(AuthUser(uid="u1"))

        assert calls == []
