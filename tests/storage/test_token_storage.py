"""Tests for the TokenStorage persistence contract."""

import pytest

from blitzware_auth.errors import AuthErrorCode, StorageError
from blitzware_auth.models import TokenSet, User
from blitzware_auth.storage import (
    InMemoryLocalStore,
    InMemorySecureStore,
    LocalStore,
    SecureStore,
    SQLiteLocalStore,
    TokenStorage,
    create_local_store,
)
from blitzware_auth.storage.tokens import (
    LOCAL_TOKEN_EXPIRY_KEY,
    LOCAL_USER_KEY,
    SECURE_ACCESS_TOKEN_KEY,
    SECURE_REFRESH_TOKEN_KEY,
)


class FailingSecureStore(InMemorySecureStore):
    """Secure store whose selected operations raise."""

    def __init__(self, fail_on: set[str]) -> None:
        super().__init__()
        self.fail_on = fail_on

    async def set_secret(self, key: str, value: str) -> None:
        if "set" in self.fail_on:
            raise OSError("keychain locked")
        await super().set_secret(key, value)

    async def get_secret(self, key: str) -> str | None:
        if "get" in self.fail_on:
            raise OSError("keychain locked")
        return await super().get_secret(key)

    async def delete_secret(self, key: str) -> None:
        if "delete" in self.fail_on:
            raise OSError("keychain locked")
        await super().delete_secret(key)


@pytest.fixture
def storage(secure_store: InMemorySecureStore, local_store: InMemoryLocalStore) -> TokenStorage:
    return TokenStorage(secure_store, local_store)


class TestStoreTokens:
    """Tests for store_tokens and reads."""

    async def test_tokens_go_to_secure_store_expiry_to_local(
        self, storage, secure_store, local_store
    ) -> None:
        await storage.store_tokens(
            TokenSet(access_token="AT1", refresh_token="RT1", expires_at=1_700_003_600_000)
        )

        assert secure_store.keys() == sorted([SECURE_ACCESS_TOKEN_KEY, SECURE_REFRESH_TOKEN_KEY])
        assert local_store.keys() == [LOCAL_TOKEN_EXPIRY_KEY]
        assert await storage.get_token("access_token") == "AT1"
        assert await storage.get_token("refresh_token") == "RT1"
        assert await storage.load_expiry() == 1_700_003_600_000

    async def test_missing_refresh_token_removes_previous(self, storage) -> None:
        await storage.store_tokens(TokenSet(access_token="AT1", refresh_token="RT1", expires_at=1))
        await storage.store_tokens(TokenSet(access_token="AT2"))

        assert await storage.get_token("access_token") == "AT2"
        assert await storage.get_token("refresh_token") is None
        assert await storage.load_expiry() is None

    async def test_write_failure_raises_storage_error(self, local_store) -> None:
        storage = TokenStorage(FailingSecureStore({"set"}), local_store)

        with pytest.raises(StorageError) as exc_info:
            await storage.store_tokens(TokenSet(access_token="AT1"))

        assert exc_info.value.code == AuthErrorCode.STORAGE_ERROR
        assert exc_info.value.key == SECURE_ACCESS_TOKEN_KEY
        assert exc_info.value.operation == "set"

    async def test_read_failure_is_absent(self, local_store) -> None:
        storage = TokenStorage(FailingSecureStore({"get"}), local_store)

        assert await storage.get_token("access_token") is None

    async def test_unparseable_expiry_is_absent(self, storage, local_store) -> None:
        await local_store.set_item(LOCAL_TOKEN_EXPIRY_KEY, "tomorrow")

        assert await storage.load_expiry() is None


class TestUserCache:
    """Tests for store_user and load_user."""

    async def test_user_round_trips_with_extra_claims(self, storage) -> None:
        user = User.model_validate(
            {
                "sub": "user_123",
                "email": "ada@example.com",
                "roles": ["admin", {"id": "r2", "name": "Editor"}],
                "locale": "en-GB",
            }
        )

        await storage.store_user(user)
        loaded = await storage.load_user()

        assert loaded == user
        assert loaded.model_extra == {"locale": "en-GB"}
        assert loaded.role_names() == ["admin", "Editor"]

    async def test_corrupt_user_is_absent(self, storage, local_store) -> None:
        await local_store.set_item(LOCAL_USER_KEY, "{not json")

        assert await storage.load_user() is None


class TestClear:
    """Tests for clear."""

    async def test_removes_everything(self, storage, secure_store, local_store) -> None:
        await storage.store_tokens(TokenSet(access_token="AT1", refresh_token="RT1", expires_at=5))
        await storage.store_user(User(sub="user_123"))

        await storage.clear()

        assert secure_store.keys() == []
        assert local_store.keys() == []

    async def test_clear_is_idempotent(self, storage) -> None:
        await storage.clear()
        await storage.clear()

    async def test_attempts_local_cleanup_when_secure_delete_fails(self, local_store) -> None:
        secure = FailingSecureStore(set())
        storage = TokenStorage(secure, local_store)
        await storage.store_tokens(TokenSet(access_token="AT1", expires_at=5))
        secure.fail_on = {"delete"}

        with pytest.raises(StorageError) as exc_info:
            await storage.clear()

        assert exc_info.value.operation == "delete"
        assert local_store.keys() == []


class TestStoreFactory:
    """Tests for create_local_store and protocol conformance."""

    def test_in_memory_stores_satisfy_protocols(self) -> None:
        assert isinstance(InMemorySecureStore(), SecureStore)
        assert isinstance(InMemoryLocalStore(), LocalStore)
        assert isinstance(SQLiteLocalStore(":memory:"), LocalStore)

    def test_default_backend_is_memory(self, monkeypatch) -> None:
        monkeypatch.delenv("BLITZWARE_STORAGE_BACKEND", raising=False)
        assert isinstance(create_local_store(), InMemoryLocalStore)

    def test_sqlite_backend(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("BLITZWARE_STORAGE_BACKEND", "sqlite")
        monkeypatch.setenv("BLITZWARE_STORAGE_PATH", str(tmp_path / "auth.db"))
        assert isinstance(create_local_store(), SQLiteLocalStore)

    def test_unknown_backend_raises(self, monkeypatch) -> None:
        monkeypatch.setenv("BLITZWARE_STORAGE_BACKEND", "redis")
        with pytest.raises(ValueError, match="BLITZWARE_STORAGE_BACKEND"):
            create_local_store()
