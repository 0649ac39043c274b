"""Unit tests for FirebaseIdentityProvider.

Tests cover:
- Sign-up and sign-in over the Identity Toolkit REST API
- Error code mapping to readable messages
- Current-user signal notifications
"""

from __future__ import annotations

import httpx
import pytest
import respx

from forkly.auth.exceptions import IdentityError, IdentityUnavailableError
from forkly.auth.firebase import FirebaseIdentityProvider, error_message_for
from forkly.auth.models import AuthUser
from forkly.auth.protocol import IdentityProvider


pytestmark = pytest.mark.unit

BASE_URL = "https://identitytoolkit.googleapis.com/v1"
SIGN_IN_URL = f"{BASE_URL}/accounts:signInWithPassword"
SIGN_UP_URL = f"{BASE_URL}/accounts:signUp"


@pytest.fixture
async def provider():
    provider = FirebaseIdentityProvider(api_key="web-key-123")
    await provider.initialize()
    yield provider
    await provider.shutdown()


def _error(message: str, status_code: int = 400) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"error": {"code": status_code, "message": message, "errors": []}},
    )


class TestErrorMessageFor:
    """Tests for error_message_for."""

    def test_known_code(self) -> None:
        """Should map known codes to readable text."""
        code, message = error_message_for("EMAIL_EXISTS")
        assert code == "EMAIL_EXISTS"
        assert message == "The email address is already in use by another account."

    def test_known_code_with_detail(self) -> None:
        """Should strip the detail suffix before looking up the code."""
        code, message = error_message_for(
            "WEAK_PASSWORD : Password should be at least 6 characters"
        )
        assert code == "WEAK_PASSWORD"
        assert "6 characters" in message

    def test_unknown_code_with_detail(self) -> None:
        """Should fall back to the provider's detail text."""
        code, message = error_message_for("SOMETHING_NEW : Details from Firebase")
        assert code == "SOMETHING_NEW"
        assert message == "Details from Firebase"

    def test_unknown_bare_code(self) -> None:
        """Should humanize an unknown bare code."""
        _, message = error_message_for("QUOTA_EXCEEDED")
        assert message == "Quota exceeded"


class TestSignIn:
    """Tests for sign-in."""

    def test_satisfies_protocol(self) -> None:
        """Should implement the identity provider protocol."""
        assert isinstance(FirebaseIdentityProvider(api_key="k"), IdentityProvider)

    @respx.mock
    async def test_sign_in_success(self, provider: FirebaseIdentityProvider) -> None:
        """Should return the user and make it current."""
        route = respx.post(SIGN_IN_URL).mock(
            return_value=httpx.Response(
                200,
                json={"localId": "uid-1", "email": "cook@example.com", "idToken": "t"},
            )
        )

        user = await provider.sign_in("cook@example.com", "secret")

        assert user == AuthUser(uid="uid-1", email="cook@example.com")
        assert provider.current_user == user
        request = route.calls.last.request
        assert request.url.params["key"] == "web-key-123"
        assert b'"returnSecureToken":true' in request.content

    @respx.mock
    async def test_sign_in_notifies_listeners(
        self, provider: FirebaseIdentityProvider
    ) -> None:
        """Should publish the new user to subscribers."""
        respx.post(SIGN_IN_URL).mock(
            return_value=httpx.Response(200, json={"localId": "uid-1"})
        )
        seen: list[AuthUser | None] = []
        provider.subscribe(seen.append)

        await provider.sign_in("cook@example.com", "secret")

        assert seen == [AuthUser(uid="uid-1", email="cook@example.com")]

    @respx.mock
    async def test_invalid_password(self, provider: FirebaseIdentityProvider) -> None:
        """Should surface a readable message and stay signed out."""
        respx.post(SIGN_IN_URL).mock(return_value=_error("INVALID_PASSWORD"))

        with pytest.raises(IdentityError) as exc_info:
            await provider.sign_in("cook@example.com", "wrong")

        assert exc_info.value.code == "INVALID_PASSWORD"
        assert "password is invalid" in exc_info.value.message
        assert provider.current_user is None

    @respx.mock
    async def test_non_json_error(self, provider: FirebaseIdentityProvider) -> None:
        """Should still raise IdentityError for unexpected error bodies."""
        respx.post(SIGN_IN_URL).mock(return_value=httpx.Response(503, text="down"))

        with pytest.raises(IdentityError) as exc_info:
            await provider.sign_in("cook@example.com", "secret")

        assert "503" in exc_info.value.message

    @respx.mock
    async def test_network_failure(self, provider: FirebaseIdentityProvider) -> None:
        """Should raise IdentityUnavailableError on transport failure."""
        respx.post(SIGN_IN_URL).mock(side_effect=httpx.ConnectError("offline"))

        with pytest.raises(IdentityUnavailableError) as exc_info:
            await provider.sign_in("cook@example.com", "secret")

        assert "Network error" in exc_info.value.message

    @respx.mock
    async def test_response_without_uid(self, provider: FirebaseIdentityProvider) -> None:
        """Should reject a success response that carries no user id."""
        respx.post(SIGN_IN_URL).mock(return_value=httpx.Response(200, json={}))

        with pytest.raises(IdentityError):
            await provider.sign_in("cook@example.com", "secret")


class TestSignUpAndOut:
    """Tests for sign-up and sign-out."""

    @respx.mock
    async def test_sign_up_success(self, provider: FirebaseIdentityProvider) -> None:
        """Should create the account and sign it in."""
        respx.post(SIGN_UP_URL).mock(
            return_value=httpx.Response(200, json={"localId": "new-uid", "email": "a@b.c"})
        )

        user = await provider.sign_up("a@b.c", "secret1")

        assert user.uid == "new-uid"
        assert provider.current_user == user

    @respx.mock
    async def test_email_exists(self, provider: FirebaseIdentityProvider) -> None:
        """Should map EMAIL_EXISTS to a readable message."""
        respx.post(SIGN_UP_URL).mock(return_value=_error("EMAIL_EXISTS"))

        with pytest.raises(IdentityError) as exc_info:
            await provider.sign_up("a@b.c", "secret1")

        assert "already in use" in exc_info.value.message

    @respx.mock
    async def test_sign_out_publishes_none(self, provider: FirebaseIdentityProvider) -> None:
        """Should clear the current user and notify subscribers."""
        respx.post(SIGN_IN_URL).mock(
            return_value=httpx.Response(200, json={"localId": "uid-1"})
        )
        await provider.sign_in("cook@example.com", "secret")
        seen: list[AuthUser | None] = []
        provider.subscribe(seen.append)

        provider.sign_out()

        assert provider.current_user is None
        assert seen == [None]

    def test_unsubscribe_stops_notifications(self) -> None:
        """Should not call a listener after it unsubscribed."""
        provider = FirebaseIdentityProvider(api_key="k")
        seen: list[AuthUser | None] = []
        unsubscribe = provider.subscribe(seen.append)
        unsubscribe()

        provider._set_user(AuthUser(uid="x"))

        assert seen == []

    def test_failing_listener_does_not_block_others(self) -> None:
        """Should keep notifying when one listener raises."""
        provider = FirebaseIdentityProvider(api_key="k")
        seen: list[AuthUser | None] = []

        def broken(_user: AuthUser | None) -> None:
            raise RuntimeError("boom")

        provider.subscribe(broken)
        provider.subscribe(seen.append)

        provider._set_user(AuthUser(uid="x"))

        assert seen == [AuthUser(uid="x")]

    async def test_sign_in_before_initialize_raises(self) -> None:
        """Should refuse to send requests without an HTTP client."""
        provider = FirebaseIdentityProvider(api_key="k")

        with pytest.raises(RuntimeError):
            await provider.sign_in("a@b.c", "pw")
