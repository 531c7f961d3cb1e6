"""Role checks and small user/token helpers.

All functions are total: a missing user, missing roles or malformed role
entries yield False/empty results instead of raising. Role names are
compared case-insensitively.
"""

from __future__ import annotations

import secrets
import time
from typing import Iterable, Optional

from blitzware_auth.models.tokens import MILLIS_PER_SECOND
from blitzware_auth.models.user import User

# RFC 7636 section 4.1 unreserved characters
UNRESERVED_CHARACTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
DEFAULT_RANDOM_STRING_LENGTH = 43

ANONYMOUS_DISPLAY_NAME = "Anonymous"
DEFAULT_DISPLAY_NAME = "User"


def _normalized_roles(user: Optional[User]) -> set[str]:
    if user is None:
        return set()
    return {name.lower() for name in user.role_names()}


def has_role(user: Optional[User], role_name: str) -> bool:
    """Return True if ``user`` holds ``role_name`` (case-insensitive)."""
    if not role_name:
        return False
    return role_name.lower() in _normalized_roles(user)


def has_any_role(user: Optional[User], role_names: Iterable[str]) -> bool:
    """Return True if ``user`` holds at least one of ``role_names``."""
    held = _normalized_roles(user)
    return any(name and name.lower() in held for name in role_names)


def has_all_roles(user: Optional[User], role_names: Iterable[str]) -> bool:
    """Return True if ``user`` holds every one of ``role_names``.

    An empty ``role_names`` yields False: holding "all of nothing" does not
    grant access.
    """
    wanted = [name for name in role_names if name]
    if not wanted:
        return False
    held = _normalized_roles(user)
    return all(name.lower() in held for name in wanted)


def get_user_roles(user: Optional[User]) -> list[str]:
    """Return the user's role names in server order (original casing)."""
    if user is None:
        return []
    return user.role_names()


def display_name(user: Optional[User]) -> str:
    """Return username, then email, then "User"; "Anonymous" without a user."""
    if user is None:
        return ANONYMOUS_DISPLAY_NAME
    return user.username or user.email or DEFAULT_DISPLAY_NAME


def is_token_expired(expires_at_ms: Optional[int], now_ms: Optional[int] = None) -> bool:
    """Return True if a stored expiry timestamp (epoch milliseconds) has passed.

    A missing expiry is reported as not expired; callers that need a strict
    answer use the engine's local validity check instead.
    """
    if expires_at_ms is None:
        return False
    if now_ms is None:
        now_ms = int(time.time() * MILLIS_PER_SECOND)
    return now_ms >= expires_at_ms


def generate_random_string(length: int = DEFAULT_RANDOM_STRING_LENGTH) -> str:
    """Return a cryptographically random string over the unreserved charset.

    Raises:
        ValueError: If ``length`` is not positive.
    """
    if length <= 0:
        raise ValueError(f"length must be positive, got {length}")
    return "".join(secrets.choice(UNRESERVED_CHARACTERS) for _ in range(length))


__all__ = [
    "display_name",
    "generate_random_string",
    "get_user_roles",
    "has_all_roles",
    "has_any_role",
    "has_role",
    "is_token_expired",
]
