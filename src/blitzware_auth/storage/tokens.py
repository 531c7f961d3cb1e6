"""Persistence contract for tokens, token expiry and the cached user.

TokenStorage is the only writer of authentication data. Secrets go to the
SecureStore; the expiry timestamp and serialized user go to the LocalStore.

Failure policy:
    - write/delete failures raise StorageError
    - read failures are logged and reported as absent (None)
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import ValidationError

from blitzware_auth.errors import StorageError
from blitzware_auth.models.tokens import TokenSet
from blitzware_auth.models.user import User
from blitzware_auth.observability import get_logger
from blitzware_auth.storage.local import LocalStore
from blitzware_auth.storage.secure import SecureStore

logger = get_logger(__name__)

TokenKind = Literal["access_token", "refresh_token"]

SECURE_ACCESS_TOKEN_KEY = "blitzware_access_token"
SECURE_REFRESH_TOKEN_KEY = "blitzware_refresh_token"
LOCAL_USER_KEY = "@blitzware/user"
LOCAL_TOKEN_EXPIRY_KEY = "@blitzware/token_expiry"

_SECURE_KEYS: dict[str, str] = {
    "access_token": SECURE_ACCESS_TOKEN_KEY,
    "refresh_token": SECURE_REFRESH_TOKEN_KEY,
}


class TokenStorage:
    """Reads and writes authentication data under fixed keys.

    Example:
        >>> storage = TokenStorage(InMemorySecureStore(), InMemoryLocalStore())
        >>> await storage.store_tokens(TokenSet(access_token="AT1"))
        >>> await storage.get_token("access_token")
        'AT1'
    """

    def __init__(self, secure_store: SecureStore, local_store: LocalStore) -> None:
        self._secure = secure_store
        self._local = local_store

    async def store_tokens(self, tokens: TokenSet) -> None:
        """Persist a TokenSet.

        A missing refresh token or expiry removes any previously stored one,
        so stored state always describes exactly this TokenSet.

        Raises:
            StorageError: If any write or delete fails.
        """
        await self._set_secret(SECURE_ACCESS_TOKEN_KEY, tokens.access_token)
        if tokens.refresh_token:
            await self._set_secret(SECURE_REFRESH_TOKEN_KEY, tokens.refresh_token)
        else:
            await self._delete_secret(SECURE_REFRESH_TOKEN_KEY)

        if tokens.expires_at is not None:
            await self._set_item(LOCAL_TOKEN_EXPIRY_KEY, str(tokens.expires_at))
        else:
            await self._remove_items([LOCAL_TOKEN_EXPIRY_KEY])

    async def get_token(self, kind: TokenKind) -> Optional[str]:
        """Return the stored access or refresh token, or None if absent or unreadable."""
        key = _SECURE_KEYS[kind]
        try:
            value = await self._secure.get_secret(key)
        except Exception as exc:
            logger.debug("blitzware.storage.read_failed", key=key, error=str(exc))
            return None
        return value or None

    async def load_expiry(self) -> Optional[int]:
        """Return the stored expiry (epoch milliseconds), or None."""
        raw = await self._get_item(LOCAL_TOKEN_EXPIRY_KEY)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.debug("blitzware.storage.invalid_expiry", value=raw)
            return None

    async def store_user(self, user: User) -> None:
        """Persist the user as JSON.

        Raises:
            StorageError: If the write fails.
        """
        await self._set_item(LOCAL_USER_KEY, user.model_dump_json())

    async def load_user(self) -> Optional[User]:
        """Return the cached user, or None if absent or unreadable."""
        raw = await self._get_item(LOCAL_USER_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError as exc:
            logger.debug("blitzware.storage.invalid_user", error=str(exc))
            return None

    async def clear(self) -> None:
        """Delete every stored token, the cached user and the expiry.

        Every delete is attempted even if an earlier one fails; the first
        failure is raised afterwards.

        Raises:
            StorageError: If any delete failed.
        """
        first_error: Optional[StorageError] = None
        for key in (SECURE_ACCESS_TOKEN_KEY, SECURE_REFRESH_TOKEN_KEY):
            try:
                await self._delete_secret(key)
            except StorageError as exc:
                first_error = first_error or exc
        try:
            await self._remove_items([LOCAL_USER_KEY, LOCAL_TOKEN_EXPIRY_KEY])
        except StorageError as exc:
            first_error = first_error or exc
        if first_error is not None:
            raise first_error

    async def _set_secret(self, key: str, value: str) -> None:
        try:
            await self._secure.set_secret(key, value)
        except Exception as exc:
            raise StorageError(key, "set", str(exc) or type(exc).__name__) from exc

    async def _delete_secret(self, key: str) -> None:
        try:
            await self._secure.delete_secret(key)
        except Exception as exc:
            raise StorageError(key, "delete", str(exc) or type(exc).__name__) from exc

    async def _get_item(self, key: str) -> Optional[str]:
        try:
            return await self._local.get_item(key)
        except Exception as exc:
            logger.debug("blitzware.storage.read_failed", key=key, error=str(exc))
            return None

    async def _set_item(self, key: str, value: str) -> None:
        try:
            await self._local.set_item(key, value)
        except Exception as exc:
            raise StorageError(key, "set", str(exc) or type(exc).__name__) from exc

    async def _remove_items(self, keys: list[str]) -> None:
        try:
            await self._local.remove_items(keys)
        except Exception as exc:
            raise StorageError(", ".join(keys), "delete", str(exc) or type(exc).__name__) from exc
