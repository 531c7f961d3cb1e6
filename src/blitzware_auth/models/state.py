"""Observable authentication state owned by the facade."""

from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, Field

from blitzware_auth.errors import AuthError
from blitzware_auth.models.base import BlitzWareBaseModel
from blitzware_auth.models.user import User


class AuthState(BlitzWareBaseModel):
    """Snapshot of authentication state for rendering.

    Derived from engine calls; never the source of truth.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    is_authenticated: bool = Field(default=False)
    is_loading: bool = Field(default=True)
    user: Optional[User] = Field(default=None)
    error: Optional[AuthError] = Field(default=None)
