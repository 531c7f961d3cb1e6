"""Tests for data models."""

import pytest
from pydantic import ValidationError

from blitzware_auth.errors import AuthenticationFailedError
from blitzware_auth.models import AuthState, DetailedRole, TokenSet, User, role_name


class TestTokenSet:
    """Tests for TokenSet."""

    def test_from_token_response_uses_expires_in_and_clock(self) -> None:
        tokens = TokenSet.from_token_response(
            {"access_token": "AT1", "refresh_token": "RT1", "expires_in": 3600},
            now=1_700_000_000.0,
        )

        assert tokens.access_token == "AT1"
        assert tokens.refresh_token == "RT1"
        assert tokens.expires_at == 1_700_003_600_000
        assert tokens.token_type == "Bearer"

    def test_from_token_response_accepts_expires_at_seconds(self) -> None:
        tokens = TokenSet.from_token_response(
            {"access_token": "AT1", "expires_at": 1_700_000_100}, now=0.0
        )

        assert tokens.expires_at == 1_700_000_100_000
        assert tokens.refresh_token is None

    def test_from_token_response_without_lifetime(self) -> None:
        tokens = TokenSet.from_token_response({"access_token": "AT1", "refresh_token": ""}, 0.0)

        assert tokens.expires_at is None
        assert tokens.refresh_token is None

    def test_missing_access_token_raises(self) -> None:
        with pytest.raises(KeyError):
            TokenSet.from_token_response({"token_type": "Bearer"}, 0.0)

    def test_empty_access_token_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TokenSet(access_token="")

    def test_frozen(self) -> None:
        tokens = TokenSet(access_token="AT1")
        with pytest.raises(ValidationError):
            tokens.access_token = "AT2"


class TestUser:
    """Tests for User and role normalization."""

    def test_mixed_role_shapes(self) -> None:
        user = User.model_validate(
            {"sub": "u1", "roles": ["admin", {"id": "r2", "name": "Editor", "extra": 1}]}
        )

        assert user.roles[0] == "admin"
        assert isinstance(user.roles[1], DetailedRole)
        assert user.role_names() == ["admin", "Editor"]

    def test_null_roles_read_as_no_roles(self) -> None:
        user = User.model_validate({"sub": "u1", "roles": None})

        assert user.roles == []
        assert user.role_names() == []

    def test_numeric_role_id_is_accepted(self) -> None:
        user = User.model_validate({"sub": "u1", "roles": [{"id": 1, "name": "admin"}]})

        assert user.roles[0] == DetailedRole(id="1", name="admin")

    def test_sub_required(self) -> None:
        with pytest.raises(ValidationError):
            User.model_validate({"email": "a@example.com"})

    @pytest.mark.parametrize(
        ("role", "expected"),
        [
            ("admin", "admin"),
            (DetailedRole(name="Editor"), "Editor"),
            ({"name": "viewer"}, "viewer"),
            ({"id": "r3"}, None),
            (42, None),
        ],
    )
    def test_role_name(self, role, expected) -> None:
        assert role_name(role) == expected


class TestAuthState:
    """Tests for AuthState."""

    def test_defaults(self) -> None:
        state = AuthState()

        assert state.is_authenticated is False
        assert state.is_loading is True
        assert state.user is None
        assert state.error is None

    def test_holds_auth_error(self) -> None:
        error = AuthenticationFailedError("cancelled")
        state = AuthState().model_copy(update={"error": error, "is_loading": False})

        assert state.error is error
        assert state.is_loading is False
