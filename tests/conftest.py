"""Shared pytest fixtures for BlitzWare auth tests.

Engine, mock server, browser, clock and store fixtures come from
blitzware_auth.testing.fixtures; JWT helpers live here.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

import pytest
from joserfc import jwt
from joserfc.jwk import OctKey

# Load blitzware_auth.testing fixtures (mock_server, browser, frozen_clock, engine, ...)
pytest_plugins = ["blitzware_auth.testing.fixtures"]

MakeJwt = Callable[..., str]


@pytest.fixture
def signing_key() -> OctKey:
    """Random HS256 key; the client never verifies signatures, any key works."""
    return OctKey.generate_key(256)


@pytest.fixture
def make_jwt(signing_key: OctKey) -> MakeJwt:
    """Factory building compact JWTs with the given exp and extra claims."""

    def _make(exp: Optional[float] = None, **claims: Any) -> str:
        payload: dict[str, Any] = {"sub": "user_123", "iat": int(time.time()), **claims}
        if exp is not None:
            payload["exp"] = exp
        return jwt.encode({"alg": "HS256"}, payload, signing_key)

    return _make
