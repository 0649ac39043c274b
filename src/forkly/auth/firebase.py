"""Firebase Authentication identity provider.

Email/password sign-up and sign-in go through the Identity Toolkit REST API
(``accounts:signUp`` and ``accounts:signInWithPassword``) using the project's
web API key. Sign-out only drops the local session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import orjson

from forkly.auth.base import IdentitySignal
from forkly.auth.exceptions import IdentityError, IdentityUnavailableError
from forkly.auth.models import AuthUser
from forkly.observability.logging import get_logger, mask_secret


if TYPE_CHECKING:
    from forkly.core.config import Settings


logger = get_logger(__name__)

_ERROR_MESSAGES = {
    "EMAIL_EXISTS": "The email address is already in use by another account.",
    "EMAIL_NOT_FOUND": (
        "There is no user record corresponding to this identifier. "
        "The user may have been deleted."
    ),
    "INVALID_PASSWORD": "The password is invalid or the user does not have a password.",
    "INVALID_LOGIN_CREDENTIALS": "The email address or password is incorrect.",
    "INVALID_EMAIL": "The email address is badly formatted.",
    "MISSING_EMAIL": "An email address must be provided.",
    "MISSING_PASSWORD": "A password must be provided.",
    "WEAK_PASSWORD": "The password must be 6 characters long or more.",
    "USER_DISABLED": "The user account has been disabled by an administrator.",
    "OPERATION_NOT_ALLOWED": "Password sign-in is disabled for this project.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": (
        "We have blocked all requests from this device due to unusual activity. "
        "Try again later."
    ),
}

_NETWORK_MESSAGE = (
    "Network error (such as timeout, interrupted connection or unreachable host) "
    "has occurred."
)


def error_message_for(raw: str) -> tuple[str, str]:
    """Map an Identity Toolkit error string to ``(code, readable message)``.

    Raw messages look like ``EMAIL_EXISTS`` or
    ``WEAK_PASSWORD : Password should be at least 6 characters``.
    """
    code, _, detail = raw.partition(" : ")
    code = code.strip()
    message = _ERROR_MESSAGES.get(code)
    if message is None:
        message = detail.strip() or code.replace("_", " ").capitalize()
    return code, message


class FirebaseIdentityProvider(IdentitySignal):
    """Identity provider backed by Firebase Authentication.

    Example:
        ```python
        provider = FirebaseIdentityProvider(api_key="...")
        await provider.initialize()
        user = await provider.sign_in("cook@example.com", "secret")
        ```
    """

    DEFAULT_BASE_URL = "https://identitytoolkit.googleapis.com/v1"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__()
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> FirebaseIdentityProvider:
        return cls(
            api_key=settings.FIREBASE_WEB_API_KEY,
            base_url=settings.firebase.identity_base_url,
            timeout=settings.firebase.timeout,
            http_client=http_client,
        )

    async def initialize(self) -> None:
        """Create the HTTP client unless one was injected."""
        if self._http_client is not None:
            return
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={"Content-Type": "application/json"},
        )
        self._owns_http_client = True
        logger.info(
            "FirebaseIdentityProvider initialized",
            api_key=mask_secret(self.api_key),
        )

    async def shutdown(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("FirebaseIdentityProvider shutdown")

    async def sign_up(self, email: str, password: str) -> AuthUser:
        """Create an account via ``accounts:signUp`` and sign it in."""
        data = await self._post("accounts:signUp", email, password)
        user = self._user_from(data, email)
        logger.info("User signed up", user_id=user.uid)
        self._set_user(user)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in via ``accounts:signInWithPassword``."""
        data = await self._post("accounts:signInWithPassword", email, password)
        user = self._user_from(data, email)
        logger.info("User signed in", user_id=user.uid)
        self._set_user(user)
        return user

    def sign_out(self) -> None:
        if self._current_user is not None:
            logger.info("User signed out", user_id=self._current_user.uid)
        self._set_user(None)

    @staticmethod
    def _user_from(data: dict[str, Any], email: str) -> AuthUser:
        uid = data.get("localId")
        if not uid:
            msg = "The identity service returned an incomplete response."
            raise IdentityError(msg)
        return AuthUser(uid=uid, email=data.get("email") or email)

    async def _post(self, method: str, email: str, password: str) -> dict[str, Any]:
        if self._http_client is None:
            msg = "Provider not initialized. Call initialize() first."
            raise RuntimeError(msg)

        url = f"{self.base_url}/{method}"
        payload = orjson.dumps(
            {"email": email, "password": password, "returnSecureToken": True}
        )
        try:
            response = await self._http_client.post(
                url,
                params={"key": self.api_key},
                content=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as e:
            logger.warning(
                "Failed to reach identity service",
                method=method,
                error=type(e).__name__,
            )
            raise IdentityUnavailableError(_NETWORK_MESSAGE) from e

        try:
            body = orjson.loads(response.content) if response.content else {}
        except orjson.JSONDecodeError:
            body = {}

        if response.is_success and isinstance(body, dict):
            return body

        error = body.get("error") if isinstance(body, dict) else None
        raw = str(error.get("message", "")) if isinstance(error, dict) else ""
        if raw:
            code, message = error_message_for(raw)
        else:
            code = f"HTTP_{response.status_code}"
            message = f"The identity service returned HTTP {response.status_code}."
        logger.warning(
            "Identity service rejected request",
            method=method,
            status_code=response.status_code,
            code=code,
        )
        raise IdentityError(message, code=code)
