"""Local, unverified inspection of access token claims.

This client is a public client and holds no verification key, so the
payload of an access token is read WITHOUT checking its signature. The
expiry read here is a hint that saves a network round trip for ordinary
expiry; it is not a security boundary. Server introspection
(TokenIntrospector.verify_with_server) is the trust boundary.

Names in this module say "peek" to keep that asymmetry visible at call sites.
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional

from joserfc.errors import JoseError
from joserfc.jws import extract_compact

from blitzware_auth.observability import get_logger

logger = get_logger(__name__)

Claims = dict[str, Any]


def peek_claims(token: Optional[str]) -> Optional[Claims]:
    """Decode a compact JWS payload without verifying its signature.

    Args:
        token: Raw token string (may be opaque or malformed).

    Returns:
        The payload claims, or None if the token is not a decodable JWS
        with a JSON object payload.
    """
    if not token or token.count(".") != 2:
        return None
    try:
        obj = extract_compact(token.encode("ascii"))
        claims = json.loads(obj.payload)
    except (JoseError, ValueError, TypeError) as exc:
        logger.debug("blitzware.jwt.peek_failed", error=str(exc) or type(exc).__name__)
        return None
    return claims if isinstance(claims, dict) else None


def parse_exp(value: Any) -> Optional[float]:
    """Convert an ``exp`` claim to epoch seconds.

    Numbers and numeric strings are accepted; booleans, zero, negatives and
    anything else yield None.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        exp = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(exp) or exp <= 0:
        return None
    return exp


def peek_local_expiry(token: Optional[str]) -> Optional[float]:
    """Return the unverified ``exp`` of a JWT access token in epoch seconds, or None."""
    claims = peek_claims(token)
    if claims is None:
        return None
    return parse_exp(claims.get("exp"))


def is_expired_at(exp: Optional[float], now: float) -> bool:
    """Return True if ``exp`` is missing or has been reached.

    The boundary is inclusive: a token whose ``exp`` equals ``now`` is expired.
    """
    if exp is None:
        return True
    return now >= exp
