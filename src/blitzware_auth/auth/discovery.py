"""Authorization server endpoint discovery.

Fetches the provider's well-known metadata document once per resolver and
falls back to conventional endpoint paths under the base URL when the
document cannot be fetched or parsed. Resolution never fails.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx
from authlib.oidc.discovery import get_well_known_url
from pydantic import Field

from blitzware_auth.models.base import BlitzWareBaseModel
from blitzware_auth.observability import get_logger

logger = get_logger(__name__)

DEFAULT_DISCOVERY_TIMEOUT_SECONDS = 10.0

# Metadata field -> (DiscoveryDocument field, fallback path under base URL)
_ENDPOINT_FIELDS: dict[str, tuple[str, str]] = {
    "authorization_endpoint": ("authorization_endpoint", "/authorize"),
    "token_endpoint": ("token_endpoint", "/token"),
    "revocation_endpoint": ("revocation_endpoint", "/revoke"),
    "userinfo_endpoint": ("userinfo_endpoint", "/userinfo"),
    "end_session_endpoint": ("logout_endpoint", "/logout"),
    "introspection_endpoint": ("introspection_endpoint", "/introspect"),
}


class DiscoveryDocument(BlitzWareBaseModel):
    """Endpoint URLs of the authorization server.

    Attributes:
        authorization_endpoint: Interactive authorization URL.
        token_endpoint: Code exchange and refresh URL.
        revocation_endpoint: Token revocation URL.
        userinfo_endpoint: User profile URL (bearer access token).
        logout_endpoint: Session logout URL.
        introspection_endpoint: RFC 7662 introspection URL.
        from_fallback: True when any endpoint came from the static fallback map.
    """

    authorization_endpoint: str = Field(..., description="Authorization endpoint URL")
    token_endpoint: str = Field(..., description="Token endpoint URL")
    revocation_endpoint: str = Field(..., description="Revocation endpoint URL")
    userinfo_endpoint: str = Field(..., description="Userinfo endpoint URL")
    logout_endpoint: str = Field(..., description="Logout endpoint URL")
    introspection_endpoint: str = Field(..., description="Introspection endpoint URL")
    from_fallback: bool = Field(default=False, description="Built from fallback paths")


def fallback_document(base_url: str) -> DiscoveryDocument:
    """Build the static fallback document under ``base_url``."""
    base = base_url.rstrip("/")
    values = {field: f"{base}{path}" for field, path in _ENDPOINT_FIELDS.values()}
    return DiscoveryDocument(**values, from_fallback=True)


def parse_discovery_document(data: Any, base_url: str) -> DiscoveryDocument:
    """Parse a metadata document, completing missing endpoints from the fallback map.

    Args:
        data: Decoded JSON body of the well-known document.
        base_url: Base URL for fallback paths.

    Returns:
        DiscoveryDocument with every endpoint populated.

    Raises:
        ValueError: If ``data`` is not a JSON object or carries no usable endpoint.
    """
    if not isinstance(data, dict):
        raise ValueError("Discovery response is not a JSON object")

    fallback = fallback_document(base_url)
    values: dict[str, str] = {}
    for metadata_key, (field, _) in _ENDPOINT_FIELDS.items():
        url = data.get(metadata_key)
        if isinstance(url, str) and url:
            values[field] = url

    if not values:
        raise ValueError("Discovery response carries no endpoints")

    used_fallback = len(values) < len(_ENDPOINT_FIELDS)
    for field, _ in _ENDPOINT_FIELDS.values():
        values.setdefault(field, getattr(fallback, field))
    return DiscoveryDocument(**values, from_fallback=used_fallback)


class DiscoveryResolver:
    """Lazily resolves and memoizes the DiscoveryDocument.

    The document is cached in memory for the resolver's lifetime and never
    persisted. Concurrent first calls share a single fetch.

    Example:
        >>> resolver = DiscoveryResolver("https://auth.blitzware.xyz/api/auth")
        >>> document = await resolver.resolve()
        >>> document.token_endpoint
        'https://auth.blitzware.xyz/api/auth/token'
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_DISCOVERY_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            base_url: Authorization server base URL.
            timeout: Timeout in seconds for the metadata fetch.
            transport: Optional httpx transport for testing.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._document: Optional[DiscoveryDocument] = None
        self._lock = asyncio.Lock()

    @property
    def well_known_url(self) -> str:
        return get_well_known_url(self._base_url, external=True)

    async def resolve(self) -> DiscoveryDocument:
        """Return the discovery document, fetching it on first use.

        Never raises: any fetch or parse failure yields the fallback document.
        """
        if self._document is not None:
            return self._document
        async with self._lock:
            if self._document is None:
                self._document = await self._resolve_uncached()
        return self._document

    async def _resolve_uncached(self) -> DiscoveryDocument:
        try:
            data = await self._fetch()
            document = parse_discovery_document(data, self._base_url)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "blitzware.discovery.fallback",
                base_url=self._base_url,
                error=str(exc) or type(exc).__name__,
            )
            return fallback_document(self._base_url)

        logger.info(
            "blitzware.discovery.resolved",
            base_url=self._base_url,
            partial=document.from_fallback,
        )
        return document

    async def _fetch(self) -> Any:
        kwargs: dict[str, Any] = {"timeout": httpx.Timeout(self._timeout)}
        if self._transport is not None:
            kwargs["transport"] = self._transport

        async with httpx.AsyncClient(**kwargs) as client:
            resp = await client.get(self.well_known_url, headers={"Accept": "application/json"})
            resp.raise_for_status()
            return resp.json()
