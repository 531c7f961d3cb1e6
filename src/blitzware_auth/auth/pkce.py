"""Authorization request construction with PKCE (RFC 7636).

Uses Authlib's token generator, S256 challenge and grant-URI helpers so the
request matches what Authlib's own OAuth2 clients emit.
"""

from __future__ import annotations

from authlib.common.security import generate_token
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri
from authlib.oauth2.rfc7636 import create_s256_code_challenge
from pydantic import Field

from blitzware_auth.models.base import BlitzWareBaseModel

CODE_CHALLENGE_METHOD = "S256"
CODE_VERIFIER_LENGTH = 64
STATE_LENGTH = 32


class AuthorizationRequest(BlitzWareBaseModel):
    """A prepared authorization request.

    The verifier and state stay on the client; only the challenge travels
    in ``url``.
    """

    url: str = Field(..., description="Full authorization URL to open in the browser")
    state: str = Field(..., description="Anti-CSRF state echoed back on redirect")
    code_verifier: str = Field(..., min_length=43, max_length=128)
    code_challenge: str = Field(...)
    redirect_uri: str = Field(...)


def create_code_verifier(length: int = CODE_VERIFIER_LENGTH) -> str:
    """Return a cryptographically random PKCE code verifier (43-128 chars)."""
    if not 43 <= length <= 128:
        raise ValueError("PKCE code verifier length must be between 43 and 128")
    return generate_token(length)


def build_authorization_request(
    authorization_endpoint: str,
    client_id: str,
    redirect_uri: str,
    *,
    scope: str | None = None,
) -> AuthorizationRequest:
    """Build a ``response_type=code`` authorization request with PKCE.

    Args:
        authorization_endpoint: Authorization endpoint URL from discovery.
        client_id: OAuth2 client identifier.
        redirect_uri: Registered redirect URI.
        scope: Space-separated scopes; None requests the empty scope set.

    Returns:
        AuthorizationRequest carrying the URL, state and verifier.
    """
    code_verifier = create_code_verifier()
    code_challenge = create_s256_code_challenge(code_verifier)
    state = generate_token(STATE_LENGTH)

    url = prepare_grant_uri(
        authorization_endpoint,
        client_id,
        "code",
        redirect_uri=redirect_uri,
        scope=scope,
        state=state,
        code_challenge=code_challenge,
        code_challenge_method=CODE_CHALLENGE_METHOD,
    )
    return AuthorizationRequest(
        url=url,
        state=state,
        code_verifier=code_verifier,
        code_challenge=code_challenge,
        redirect_uri=redirect_uri,
    )
