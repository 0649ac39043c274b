"""Recipe API client exceptions.

Every failure of the recipe API client is a ``RecipeAPIError``. View models
catch the base class, decide on recovery and show ``user_message``.
"""

from __future__ import annotations


class RecipeAPIError(Exception):
    """Base exception for recipe API client errors."""

    @property
    def user_message(self) -> str:
        """Short, human-readable description suitable for display."""
        return "Something went wrong while loading recipes."


class InvalidRequestError(RecipeAPIError):
    """Raised when a request URL or its parameters cannot be built.

    No I/O is attempted. Retrying will not help.
    """

    @property
    def user_message(self) -> str:
        return "The recipe request could not be built."


class ClientNotInitializedError(RecipeAPIError):
    """Raised when a request is made before ``initialize()`` or after ``shutdown()``."""

    def __init__(
        self, message: str = "Client not initialized. Call initialize() first."
    ) -> None:
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return "The recipe service is not available right now."


class NetworkError(RecipeAPIError):
    """Raised on transport failures, including timeouts.

    The client never retries these on its own.
    """

    @property
    def user_message(self) -> str:
        return "Network error. Check your connection and try again."


class ServerError(RecipeAPIError):
    """Raised when the recipe API answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Recipe API returned HTTP {status_code}")

    @property
    def reason(self) -> str:
        """Classified cause: credentials, quota, rate limit or other."""
        if self.status_code == 401:
            return "invalid_credentials"
        if self.status_code == 402:
            return "quota_exceeded"
        if self.status_code == 429:
            return "rate_limited"
        return "unexpected_status"

    @property
    def user_message(self) -> str:
        messages = {
            "invalid_credentials": "The recipe API key is invalid.",
            "quota_exceeded": "The daily recipe API quota has been used up.",
            "rate_limited": "Too many requests. Please wait a moment.",
        }
        return messages.get(
            self.reason, f"The recipe service returned an error ({self.status_code})."
        )


class DecodeError(RecipeAPIError):
    """Raised when a 2xx body does not match the expected shape.

    ``path`` locates the offending value (e.g. ``results[0].title``),
    ``expected`` describes what was required and ``actual`` what was found.
    """

    def __init__(self, path: str, expected: str, actual: str) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Unexpected data at {path}: expected {expected}, got {actual}")

    @property
    def user_message(self) -> str:
        return "The recipe service sent data we could not read."


class NoDataError(RecipeAPIError):
    """Raised when a 2xx response carries an empty body."""

    def __init__(self, message: str = "Recipe API returned no data") -> None:
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return "The recipe service returned no data."
