"""Token set model shared by the engine and the token storage layer."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from blitzware_auth.models.base import BlitzWareBaseModel

MILLIS_PER_SECOND = 1000


class TokenSet(BlitzWareBaseModel):
    """Tokens issued by a successful login or refresh.

    Attributes:
        access_token: The access token string (always present).
        refresh_token: Refresh token; None means refresh is unavailable.
        expires_at: Epoch milliseconds when the access token expires, if known.
        token_type: Token type for the Authorization header.
        scope: Granted scope string, if the server returned one.
    """

    access_token: str = Field(..., min_length=1, description="Access token string")
    refresh_token: Optional[str] = Field(default=None, description="Refresh token string")
    expires_at: Optional[int] = Field(
        default=None, description="Access token expiry (epoch milliseconds)"
    )
    token_type: str = Field(default="Bearer", description="Token type")
    scope: Optional[str] = Field(default=None, description="Granted scope")

    @field_validator("refresh_token")
    @classmethod
    def _empty_refresh_token_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @classmethod
    def from_token_response(cls, raw_token: dict[str, Any], now: float) -> "TokenSet":
        """Convert a token endpoint response into a TokenSet.

        ``expires_in`` is preferred and anchored to ``now`` so an injected
        clock stays authoritative; a bare ``expires_at`` (epoch seconds) is
        accepted otherwise. Without either, the expiry stays unknown.

        Args:
            raw_token: Parsed JSON body of the token endpoint response.
            now: Current time in epoch seconds.

        Returns:
            TokenSet built from the response.

        Raises:
            KeyError: The response carries no access_token.
        """
        expires_at: Optional[int] = None
        if raw_token.get("expires_in") is not None:
            lifetime_ms = int(raw_token["expires_in"]) * MILLIS_PER_SECOND
            expires_at = int(now * MILLIS_PER_SECOND) + lifetime_ms
        elif raw_token.get("expires_at") is not None:
            expires_at = int(raw_token["expires_at"]) * MILLIS_PER_SECOND

        scope = raw_token.get("scope")
        return cls(
            access_token=raw_token["access_token"],
            refresh_token=raw_token.get("refresh_token"),
            expires_at=expires_at,
            token_type=raw_token.get("token_type") or "Bearer",
            scope=str(scope) if scope is not None else None,
        )
