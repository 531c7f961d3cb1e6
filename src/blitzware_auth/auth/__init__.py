"""BlitzWare authorization protocol layer.

This package provides the client side of the OAuth2 authorization code flow:
- Endpoint discovery with a static fallback map
- PKCE authorization request construction
- Browser redirect contract and callback parsing
- Unverified JWT expiry peeking and RFC 7662 introspection
- AuthProtocolEngine, which ties them to token storage

Public exports:
    AuthProtocolEngine: Token lifecycle engine
    DiscoveryResolver / DiscoveryDocument: Endpoint discovery
    TokenIntrospector / IntrospectionResult: RFC 7662 client
    AuthorizationRequest / build_authorization_request: PKCE request
    BrowserRedirect / RedirectResult: Interactive step contract
    peek_claims / peek_local_expiry: Unverified JWT inspection
"""

from blitzware_auth.auth.browser import BrowserRedirect, RedirectResult
from blitzware_auth.auth.discovery import (
    DiscoveryDocument,
    DiscoveryResolver,
    fallback_document,
)
from blitzware_auth.auth.engine import AuthProtocolEngine
from blitzware_auth.auth.introspection import IntrospectionResult, TokenIntrospector
from blitzware_auth.auth.jwt_inspector import peek_claims, peek_local_expiry
from blitzware_auth.auth.pkce import AuthorizationRequest, build_authorization_request

__all__ = [
    "AuthProtocolEngine",
    "AuthorizationRequest",
    "BrowserRedirect",
    "DiscoveryDocument",
    "DiscoveryResolver",
    "IntrospectionResult",
    "RedirectResult",
    "TokenIntrospector",
    "build_authorization_request",
    "fallback_document",
    "peek_claims",
    "peek_local_expiry",
]
