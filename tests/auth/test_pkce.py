"""Tests for PKCE authorization request construction."""

from urllib.parse import parse_qs, urlsplit

import pytest
from authlib.oauth2.rfc7636 import create_s256_code_challenge

from blitzware_auth.auth.pkce import (
    CODE_CHALLENGE_METHOD,
    build_authorization_request,
    create_code_verifier,
)

AUTHORIZE_URL = "https://auth.example.com/api/auth/authorize"


class TestCreateCodeVerifier:
    """Tests for create_code_verifier."""

    def test_default_length_within_rfc_bounds(self) -> None:
        verifier = create_code_verifier()
        assert 43 <= len(verifier) <= 128

    def test_verifiers_are_unique(self) -> None:
        assert len({create_code_verifier() for _ in range(20)}) == 20

    @pytest.mark.parametrize("length", [0, 42, 129])
    def test_rejects_out_of_range_length(self, length: int) -> None:
        with pytest.raises(ValueError):
            create_code_verifier(length)


class TestBuildAuthorizationRequest:
    """Tests for build_authorization_request."""

    def test_url_carries_code_flow_parameters(self) -> None:
        request = build_authorization_request(AUTHORIZE_URL, "c1", "app://cb")

        parts = urlsplit(request.url)
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}

        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == AUTHORIZE_URL
        assert query["response_type"] == "code"
        assert query["client_id"] == "c1"
        assert query["redirect_uri"] == "app://cb"
        assert query["state"] == request.state
        assert query["code_challenge"] == request.code_challenge
        assert query["code_challenge_method"] == CODE_CHALLENGE_METHOD
        assert "scope" not in query
        assert "code_verifier" not in query

    def test_challenge_is_s256_of_verifier(self) -> None:
        request = build_authorization_request(AUTHORIZE_URL, "c1", "app://cb")

        assert request.code_challenge == create_s256_code_challenge(request.code_verifier)
        assert request.code_challenge != request.code_verifier

    def test_scope_is_included_when_given(self) -> None:
        request = build_authorization_request(
            AUTHORIZE_URL, "c1", "app://cb", scope="openid profile"
        )

        query = parse_qs(urlsplit(request.url).query)

        assert query["scope"] == ["openid profile"]

    def test_each_request_has_fresh_state_and_verifier(self) -> None:
        first = build_authorization_request(AUTHORIZE_URL, "c1", "app://cb")
        second = build_authorization_request(AUTHORIZE_URL, "c1", "app://cb")

        assert first.state != second.state
        assert first.code_verifier != second.code_verifier
