"""Identity models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """The signed-in user as seen by the rest of the application."""

    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., description="Stable user identifier")
    email: str | None = Field(default=None, description="Sign-in email address")
