"""OAuth2 token introspection (RFC 7662).

Asks the authorization server whether a token is currently active. This is
the authoritative validity check: it observes server-side revocation, which
local JWT inspection cannot.

Two entry points:
    introspect(): raw call, raises IntrospectionFailedError on any failure.
    verify_with_server(): fail-closed helper; any failure reads as inactive.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

import httpx
from pydantic import ConfigDict, Field

from blitzware_auth.errors import IntrospectionFailedError
from blitzware_auth.models.base import BlitzWareBaseModel
from blitzware_auth.observability import get_logger

logger = get_logger(__name__)

TokenTypeHint = Literal["access_token", "refresh_token"]

DEFAULT_INTROSPECTION_TIMEOUT_SECONDS = 10.0


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


class IntrospectionResult(BlitzWareBaseModel):
    """Introspection response (RFC 7662). Never persisted.

    Only ``active`` is guaranteed; the other claims are present when the
    server returns them for an active token. Unknown claims are kept.

    Attributes:
        active: Whether the token is currently active.
        sub: Subject of the token.
        client_id: Client the token was issued to.
        username: Resource owner identifier.
        scope: Space-separated scope string.
        aud: Audience (string or list).
        iss: Issuer.
        exp: Expiration timestamp (Unix seconds).
        iat: Issued-at timestamp (Unix seconds).
        token_type: Token type, typically "Bearer".
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    active: bool = Field(..., description="Whether the token is currently active")
    sub: Optional[str] = Field(default=None)
    client_id: Optional[str] = Field(default=None)
    username: Optional[str] = Field(default=None)
    scope: Optional[str] = Field(default=None)
    aud: Optional[Union[str, list[str]]] = Field(default=None)
    iss: Optional[str] = Field(default=None)
    exp: Optional[int] = Field(default=None)
    iat: Optional[int] = Field(default=None)
    token_type: Optional[str] = Field(default=None)

    @classmethod
    def inactive(cls) -> "IntrospectionResult":
        return cls(active=False)

    @classmethod
    def from_response(cls, body: Any) -> "IntrospectionResult":
        """Build a result from a decoded response body.

        A non-boolean ``active`` is treated as False.

        Raises:
            IntrospectionFailedError: If the body is not a JSON object.
        """
        if not isinstance(body, dict):
            raise IntrospectionFailedError("Introspection response is not a JSON object")

        active = body.get("active", False)
        if not isinstance(active, bool):
            active = False

        scope = body.get("scope")
        if isinstance(scope, list):
            scope = " ".join(str(s) for s in scope)

        aud = body.get("aud")
        if isinstance(aud, list):
            aud = [str(a) for a in aud]
        elif aud is not None:
            aud = str(aud)

        known = set(cls.model_fields)
        extras = {k: v for k, v in body.items() if k not in known}

        return cls(
            active=active,
            sub=_optional_str(body.get("sub")),
            client_id=_optional_str(body.get("client_id")),
            username=_optional_str(body.get("username")),
            scope=_optional_str(scope),
            aud=aud,
            iss=_optional_str(body.get("iss")),
            exp=_optional_int(body.get("exp")),
            iat=_optional_int(body.get("iat")),
            token_type=_optional_str(body.get("token_type")),
            **extras,
        )


class TokenIntrospector:
    """RFC 7662 introspection client for a public client.

    POSTs JSON ``{token, token_type_hint, client_id}`` to the introspection
    endpoint. Results are computed fresh on every call.

    Example:
        >>> introspector = TokenIntrospector(
        ...     introspection_url="https://auth.blitzware.xyz/api/auth/introspect",
        ...     client_id="my-client",
        ... )
        >>> result = await introspector.verify_with_server(token, "access_token")
        >>> if result.active:
        ...     print(result.sub)
    """

    def __init__(
        self,
        introspection_url: str,
        client_id: str,
        *,
        timeout: float = DEFAULT_INTROSPECTION_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the introspection client.

        Args:
            introspection_url: URL of the introspection endpoint.
            client_id: OAuth2 client ID sent in the request body.
            timeout: Timeout in seconds for the call.
            transport: Optional httpx transport for testing.
        """
        self._url = introspection_url
        self._client_id = client_id
        self._timeout = timeout
        self._transport = transport

    async def introspect(
        self,
        token: str,
        token_type_hint: TokenTypeHint = "access_token",
    ) -> IntrospectionResult:
        """Introspect a token and return the server's verdict.

        Args:
            token: The token to introspect.
            token_type_hint: "access_token" or "refresh_token".

        Returns:
            IntrospectionResult (``active`` may be False).

        Raises:
            IntrospectionFailedError: On transport errors, timeouts, non-2xx
                responses or a body that is not a JSON object.
        """
        kwargs: dict[str, Any] = {"timeout": httpx.Timeout(self._timeout)}
        if self._transport is not None:
            kwargs["transport"] = self._transport

        payload = {
            "token": token,
            "token_type_hint": token_type_hint,
            "client_id": self._client_id,
        }
        try:
            async with httpx.AsyncClient(**kwargs) as client:
                resp = await client.post(
                    self._url,
                    json=payload,
                    headers={"Accept": "application/json"},
                )
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as exc:
            raise IntrospectionFailedError(
                f"Introspection endpoint returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise IntrospectionFailedError(
                f"Introspection request failed: {str(exc) or type(exc).__name__}",
                details={"cause": type(exc).__name__},
            ) from exc
        except ValueError as exc:
            raise IntrospectionFailedError("Introspection response is not valid JSON") from exc

        return IntrospectionResult.from_response(body)

    async def verify_with_server(
        self,
        token: Optional[str],
        token_type_hint: TokenTypeHint = "access_token",
    ) -> IntrospectionResult:
        """Fail-closed validity check.

        A missing token or any introspection failure yields an inactive
        result, so a failed check can never read as authenticated.
        """
        if not token:
            return IntrospectionResult.inactive()
        try:
            return await self.introspect(token, token_type_hint)
        except IntrospectionFailedError as exc:
            logger.warning(
                "blitzware.introspection.failed",
                token_type_hint=token_type_hint,
                error=exc.message,
                status_code=exc.status_code,
            )
            return IntrospectionResult.inactive()
