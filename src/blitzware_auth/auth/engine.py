"""Auth protocol engine: login, refresh, validity checks and logout.

The engine owns the token lifecycle for one user session:

- login(): authorization code + PKCE through the browser, code exchange,
  token persistence, server verification and userinfo fetch
- get_access_token(): local expiry peek first, then server introspection,
  refreshing when either says the token is no longer usable
- refresh_access_token(): refresh-token grant, coalesced across concurrent
  callers, fail-closed (any failure wipes stored auth data)
- logout(): best-effort remote logout, mandatory local cleanup

Token exchanges go through Authlib's AsyncOAuth2Client as a public client
(``token_endpoint_auth_method="none"``, client_id in the form body).
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Optional

import httpx
from authlib.integrations.base_client.errors import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from pydantic import ValidationError

from blitzware_auth.auth.browser import BrowserRedirect
from blitzware_auth.auth.discovery import DiscoveryDocument, DiscoveryResolver
from blitzware_auth.auth.introspection import IntrospectionResult, TokenIntrospector
from blitzware_auth.auth.jwt_inspector import is_expired_at, peek_local_expiry
from blitzware_auth.auth.pkce import build_authorization_request
from blitzware_auth.config import AuthConfig
from blitzware_auth.errors import (
    AuthError,
    AuthErrorCode,
    AuthenticationFailedError,
    LogoutFailedError,
    NetworkError,
    RefreshFailedError,
    StorageError,
    UserInfoFailedError,
    normalize_error,
)
from blitzware_auth.models.tokens import MILLIS_PER_SECOND, TokenSet
from blitzware_auth.models.user import User
from blitzware_auth.observability import get_logger, is_debug_mode, sanitize_for_logging
from blitzware_auth.roles import has_role as user_has_role
from blitzware_auth.roles import is_token_expired
from blitzware_auth.storage.local import LocalStore
from blitzware_auth.storage.secure import SecureStore
from blitzware_auth.storage.tokens import TokenKind, TokenStorage

logger = get_logger(__name__)

Clock = Callable[[], float]


class AuthProtocolEngine:
    """Token lifecycle engine for one client configuration and one session.

    Construct one engine per app and hand it to whatever needs it (for
    example an AuthStateFacade); there is no module-level instance.

    Example:
        >>> engine = AuthProtocolEngine(
        ...     AuthConfig(client_id="c1", redirect_uri="myapp://callback"),
        ...     secure_store=keychain,
        ...     local_store=InMemoryLocalStore(),
        ...     browser=system_browser,
        ... )
        >>> user = await engine.login()
        >>> token = await engine.get_access_token()
        >>> headers = {"Authorization": f"Bearer {token}"}
    """

    def __init__(
        self,
        config: AuthConfig,
        *,
        secure_store: SecureStore,
        local_store: LocalStore,
        browser: BrowserRedirect,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = time.time,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Immutable client configuration.
            secure_store: Platform secret store for access/refresh tokens.
            local_store: Non-secure cache for the user and the token expiry.
            browser: Collaborator that runs the interactive authorization step.
            transport: Optional httpx transport for testing (e.g. MockTransport).
            clock: Returns the current time in epoch seconds.
        """
        self._config = config
        self._storage = TokenStorage(secure_store, local_store)
        self._browser = browser
        self._transport = transport
        self._clock = clock
        self._discovery = DiscoveryResolver(
            config.normalized_base_url,
            timeout=config.http_timeout,
            transport=transport,
        )
        self._introspector: Optional[TokenIntrospector] = None
        self._refresh_task: Optional[asyncio.Future[str]] = None
        self._log = logger.bind(client_id=config.client_id)

    @property
    def config(self) -> AuthConfig:
        return self._config

    async def get_discovery(self) -> DiscoveryDocument:
        """Return the memoized discovery document."""
        return await self._discovery.resolve()

    async def login(self) -> User:
        """Run the interactive authorization code + PKCE login.

        Returns:
            The authenticated user (also cached in local storage).

        Raises:
            AuthenticationFailedError: Cancelled, rejected or invalid login.
            NetworkError: Transport failure or non-2xx on exchange/userinfo.
            StorageError: Persisting tokens or the user failed.
        """
        try:
            return await self._login()
        except AuthError as exc:
            self._log.warning("blitzware.auth.login_failed", code=exc.code.value, error=exc.message)
            raise
        except Exception as exc:
            error = normalize_error(exc, AuthErrorCode.AUTHENTICATION_FAILED)
            self._log.warning("blitzware.auth.login_failed", code=error.code.value, error=error.message)
            raise error from exc

    async def _login(self) -> User:
        discovery = await self._discovery.resolve()
        request = build_authorization_request(
            discovery.authorization_endpoint,
            self._config.client_id,
            self._config.redirect_uri,
        )

        result = await self._browser.authorize(request.url, request.redirect_uri)
        if result.type != "success" or not result.code:
            raise AuthenticationFailedError(
                "Authorization was cancelled or failed",
                details={"result": result.type, "error": result.error},
            )
        if result.state != request.state:
            raise AuthenticationFailedError("Authorization response state does not match request")

        raw_token = await self._request_tokens(
            discovery,
            grant_type="authorization_code",
            code=result.code,
            code_verifier=request.code_verifier,
        )
        tokens = self._parse_tokens(raw_token)

        try:
            await self._storage.store_tokens(tokens)
            introspector = await self._get_introspector()
            verdict = await introspector.verify_with_server(tokens.access_token, "access_token")
            if not verdict.active:
                raise AuthenticationFailedError(
                    "Freshly issued access token is not active; check client configuration"
                )
            user = await self._fetch_user_info(discovery, tokens.access_token)
            await self._storage.store_user(user)
        except Exception:
            await self._clear_after_failure("login")
            raise

        self._log.info("blitzware.auth.login_succeeded", sub=user.sub)
        return user

    async def logout(self) -> None:
        """Log out remotely (best effort) and clear all local auth data.

        Safe to call repeatedly; a failing logout endpoint never prevents
        local cleanup.

        Raises:
            LogoutFailedError: Local cleanup itself failed.
        """
        access_token = await self._storage.get_token("access_token")
        if access_token:
            await self._remote_logout(access_token)

        try:
            await self._storage.clear()
        except StorageError as exc:
            raise LogoutFailedError(exc.message, details=exc.details) from exc
        self._log.info("blitzware.auth.logged_out")

    async def _remote_logout(self, access_token: str) -> None:
        try:
            discovery = await self._discovery.resolve()
            async with httpx.AsyncClient(**self._http_kwargs()) as client:
                resp = await client.post(
                    discovery.logout_endpoint,
                    json={"client_id": self._config.client_id},
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            if not resp.is_success:
                self._log.warning("blitzware.auth.remote_logout_failed", status_code=resp.status_code)
        except httpx.HTTPError as exc:
            self._log.warning(
                "blitzware.auth.remote_logout_failed",
                error=str(exc) or type(exc).__name__,
            )

    async def get_access_token(self) -> Optional[str]:
        """Return a usable access token, refreshing it when needed.

        1. Peek the token's expiry locally; if unusable, refresh.
        2. Otherwise ask the server; if it reports the token inactive
           (e.g. revoked), refresh.
        3. Otherwise return the stored token unchanged.

        Returns:
            The access token, or None when there is no usable session.
        """
        if not await self.is_token_valid_locally():
            return await self._refresh_or_none("locally_invalid")

        token = await self._storage.get_token("access_token")
        verdict = await self._verify_with_server(token, "access_token")
        if not verdict.active:
            return await self._refresh_or_none("server_inactive")
        return token

    async def get_access_token_fast(self) -> Optional[str]:
        """Return the stored access token without any validation call.

        Only the stored expiry timestamp is checked. Suitable for call sites
        that tolerate a possibly revoked token.
        """
        token = await self._storage.get_token("access_token")
        if not token:
            return None
        expires_at = await self._storage.load_expiry()
        if is_token_expired(expires_at, self._now_millis()):
            return None
        return token

    async def refresh_access_token(self) -> str:
        """Exchange the stored refresh token for a new access token.

        Concurrent callers share one in-flight refresh and its outcome, so a
        single-use refresh token is only spent once.

        Returns:
            The new access token.

        Raises:
            RefreshFailedError: Refresh token absent, inactive, or exchange
                failed. Stored auth data has been cleared.
        """
        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.ensure_future(self._refresh())
            self._refresh_task = task
        else:
            self._log.debug("blitzware.auth.refresh_joined")
        return await asyncio.shield(task)

    async def _refresh(self) -> str:
        try:
            refresh_token = await self._storage.get_token("refresh_token")
            if not refresh_token:
                raise RefreshFailedError("No refresh token available")

            verdict = await self._verify_with_server(refresh_token, "refresh_token")
            if not verdict.active:
                raise RefreshFailedError("Refresh token is invalid or expired")

            discovery = await self._discovery.resolve()
            raw_token = await self._request_tokens(
                discovery,
                grant_type="refresh_token",
                refresh_token=refresh_token,
            )
            tokens = self._parse_tokens(raw_token)
            rotated = tokens.refresh_token is not None and tokens.refresh_token != refresh_token
            if tokens.refresh_token is None:
                tokens = tokens.model_copy(update={"refresh_token": refresh_token})
            await self._storage.store_tokens(tokens)
        except Exception as exc:
            await self._clear_after_failure("refresh")
            self._log.warning("blitzware.auth.refresh_failed", error=str(exc) or type(exc).__name__)
            if isinstance(exc, RefreshFailedError):
                raise
            message = exc.message if isinstance(exc, AuthError) else str(exc)
            cause_code = exc.code.value if isinstance(exc, AuthError) else type(exc).__name__
            raise RefreshFailedError(
                message or "Token refresh failed",
                details={"cause": cause_code},
            ) from exc

        self._log.info("blitzware.auth.refresh_succeeded", rotated=rotated)
        return tokens.access_token

    async def _refresh_or_none(self, reason: str) -> Optional[str]:
        self._log.debug("blitzware.auth.refresh_needed", reason=reason)
        try:
            return await self.refresh_access_token()
        except RefreshFailedError:
            return None

    async def get_user(self) -> Optional[User]:
        """Return the current user, or None when there is no session.

        Ensures a valid access token first. The cached user is returned when
        present; otherwise it is fetched from the userinfo endpoint and cached.
        """
        access_token = await self.get_access_token()
        if not access_token:
            return None

        cached = await self._storage.load_user()
        if cached is not None:
            return cached

        try:
            discovery = await self._discovery.resolve()
            user = await self._fetch_user_info(discovery, access_token)
        except (NetworkError, UserInfoFailedError) as exc:
            self._log.warning("blitzware.auth.userinfo_failed", code=exc.code.value, error=exc.message)
            return None
        await self._storage.store_user(user)
        return user

    async def get_user_from_storage(self) -> Optional[User]:
        """Return the cached user without any validation."""
        return await self._storage.load_user()

    async def is_authenticated(self) -> bool:
        """Return True only if the server reports the stored access token active."""
        token = await self._storage.get_token("access_token")
        verdict = await self._verify_with_server(token, "access_token")
        return verdict.active

    async def is_token_valid_locally(self) -> bool:
        """Return True if the stored access token has not reached its expiry.

        The expiry is peeked from the JWT ``exp`` claim without signature
        verification; opaque tokens use the expiry stored at issuance. A
        token with no known expiry is treated as invalid.
        """
        token = await self._storage.get_token("access_token")
        if not token:
            return False

        exp = peek_local_expiry(token)
        if exp is None:
            expires_at = await self._storage.load_expiry()
            if expires_at is not None:
                exp = expires_at / MILLIS_PER_SECOND
        return not is_expired_at(exp, self._clock())

    async def has_role(self, role_name: str) -> bool:
        """Return True if the current user holds ``role_name`` (case-insensitive)."""
        try:
            user = await self.get_user()
        except AuthError as exc:
            self._log.debug("blitzware.auth.role_check_failed", error=exc.message)
            return False
        return user_has_role(user, role_name)

    async def get_stored_token(self, kind: TokenKind) -> Optional[str]:
        """Return a stored token without validation; read failures yield None."""
        return await self._storage.get_token(kind)

    async def introspect(self, token: str, token_type_hint: str = "access_token") -> IntrospectionResult:
        """Raw introspection of an arbitrary token.

        Raises:
            IntrospectionFailedError: On any transport or protocol failure.
        """
        introspector = await self._get_introspector()
        return await introspector.introspect(token, token_type_hint)  # type: ignore[arg-type]

    async def _get_introspector(self) -> TokenIntrospector:
        if self._introspector is None:
            discovery = await self._discovery.resolve()
            self._introspector = TokenIntrospector(
                discovery.introspection_endpoint,
                self._config.client_id,
                timeout=self._config.http_timeout,
                transport=self._transport,
            )
        return self._introspector

    async def _verify_with_server(
        self,
        token: Optional[str],
        token_type_hint: TokenKind,
    ) -> IntrospectionResult:
        introspector = await self._get_introspector()
        return await introspector.verify_with_server(token, token_type_hint)

    async def _request_tokens(
        self,
        discovery: DiscoveryDocument,
        *,
        grant_type: str,
        **params: str,
    ) -> dict[str, Any]:
        """Call the token endpoint through Authlib.

        Raises:
            AuthenticationFailedError: The server answered with an OAuth error.
            NetworkError: Transport failure, timeout, 5xx or malformed body.
        """
        endpoint = discovery.token_endpoint
        try:
            async with AsyncOAuth2Client(
                client_id=self._config.client_id,
                client_secret=None,
                token_endpoint_auth_method="none",
                redirect_uri=self._config.redirect_uri,
                **self._http_kwargs(),
            ) as client:
                if grant_type == "refresh_token":
                    raw_token = await client.refresh_token(
                        endpoint, refresh_token=params["refresh_token"]
                    )
                else:
                    raw_token = await client.fetch_token(endpoint, grant_type=grant_type, **params)
        except OAuthError as exc:
            raise AuthenticationFailedError(
                f"Token endpoint rejected the request: {exc.error}",
                details={"error": exc.error, "description": exc.description},
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"Token endpoint returned {exc.response.status_code}",
                endpoint=endpoint,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"Token request failed: {str(exc) or type(exc).__name__}",
                endpoint=endpoint,
            ) from exc
        except ValueError as exc:
            raise NetworkError("Token endpoint returned an invalid body", endpoint=endpoint) from exc

        self._log.debug(
            "blitzware.auth.token_response",
            grant_type=grant_type,
            response=sanitize_for_logging(dict(raw_token)),
        )
        return dict(raw_token)

    def _parse_tokens(self, raw_token: dict[str, Any]) -> TokenSet:
        try:
            return TokenSet.from_token_response(raw_token, self._clock())
        except (KeyError, TypeError, ValueError) as exc:
            raise NetworkError("Token endpoint returned an unusable token response") from exc

    async def _fetch_user_info(self, discovery: DiscoveryDocument, access_token: str) -> User:
        endpoint = discovery.userinfo_endpoint
        try:
            async with httpx.AsyncClient(**self._http_kwargs()) as client:
                resp = await client.get(
                    endpoint,
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": "application/json",
                    },
                )
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"Userinfo endpoint returned {exc.response.status_code}",
                endpoint=endpoint,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"Userinfo request failed: {str(exc) or type(exc).__name__}",
                endpoint=endpoint,
            ) from exc
        except ValueError as exc:
            raise NetworkError("Userinfo endpoint returned invalid JSON", endpoint=endpoint) from exc

        try:
            return User.model_validate(body)
        except ValidationError as exc:
            raise UserInfoFailedError(
                "Userinfo response is not a valid user",
                details={"errors": exc.error_count()},
            ) from exc

    async def _clear_after_failure(self, operation: str) -> None:
        try:
            await self._storage.clear()
        except StorageError as exc:
            self._log.error(
                "blitzware.auth.cleanup_failed",
                operation=operation,
                key=exc.key,
                error=exc.message,
                exc_info=is_debug_mode(),
            )

    def _http_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"timeout": httpx.Timeout(self._config.http_timeout)}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    def _now_millis(self) -> int:
        return int(self._clock() * MILLIS_PER_SECOND)
