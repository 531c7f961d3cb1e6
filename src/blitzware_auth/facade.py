"""Observable authentication state over an AuthProtocolEngine.

AuthStateFacade is what a UI binds to. It exposes an immutable AuthState
snapshot, notifies subscribers on every change, and turns engine failures
into ``state.error`` instead of raising them.

Example:
    >>> facade = AuthStateFacade(engine)
    >>> unsubscribe = facade.subscribe(lambda state: render(state))
    >>> await facade.initialize()
    >>> await facade.login()
    >>> if facade.has_role("admin"):
    ...     show_admin_panel()
    >>> unsubscribe()
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from blitzware_auth.auth.engine import AuthProtocolEngine
from blitzware_auth.errors import AuthErrorCode, normalize_error
from blitzware_auth.models.state import AuthState
from blitzware_auth.observability import get_logger, is_debug_mode
from blitzware_auth.roles import has_role as user_has_role

logger = get_logger(__name__)

StateListener = Callable[[AuthState], None]
Unsubscribe = Callable[[], None]


class AuthStateFacade:
    """Single writer of AuthState for one engine."""

    def __init__(self, engine: AuthProtocolEngine) -> None:
        self._engine = engine
        self._state = AuthState()
        self._listeners: list[StateListener] = []

    @property
    def engine(self) -> AuthProtocolEngine:
        return self._engine

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: StateListener) -> Unsubscribe:
        """Register ``listener`` for state changes; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as exc:
                logger.warning(
                    "blitzware.facade.listener_failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                    error=str(exc) or type(exc).__name__,
                )

    def _fail(self, exc: Exception, code: AuthErrorCode, **changes: Any) -> None:
        error = normalize_error(exc, code)
        logger.warning(
            "blitzware.facade.operation_failed",
            code=error.code.value,
            error=error.message,
            exc_info=is_debug_mode(),
        )
        self._set_state(is_loading=False, error=error, **changes)

    async def initialize(self) -> None:
        """Load the session state from the engine.

        The user is resolved first, which refreshes an expired or revoked
        access token; the server check then runs against the token that is
        stored afterwards. ``user`` is only published together with
        ``is_authenticated=True``.
        """
        self._set_state(is_loading=True)
        try:
            user = await self._engine.get_user()
            is_authenticated = user is not None and await self._engine.is_authenticated()
        except asyncio.CancelledError:
            self._set_state(is_loading=False)
            raise
        except Exception as exc:
            self._fail(exc, AuthErrorCode.UNKNOWN_ERROR, is_authenticated=False, user=None)
            return
        if not is_authenticated:
            user = None
        self._set_state(
            is_authenticated=is_authenticated,
            user=user,
            is_loading=False,
            error=None,
        )

    async def login(self) -> None:
        """Run the interactive login; failures land in ``state.error``."""
        self._set_state(is_loading=True, error=None)
        try:
            user = await self._engine.login()
        except asyncio.CancelledError:
            self._set_state(is_loading=False)
            raise
        except Exception as exc:
            self._fail(exc, AuthErrorCode.AUTHENTICATION_FAILED, is_authenticated=False, user=None)
            return
        self._set_state(is_authenticated=True, user=user, is_loading=False)

    async def logout(self) -> None:
        """Log out; the state reads as logged out even if cleanup failed."""
        self._set_state(is_loading=True, error=None)
        try:
            await self._engine.logout()
        except asyncio.CancelledError:
            self._set_state(is_loading=False)
            raise
        except Exception as exc:
            self._fail(exc, AuthErrorCode.LOGOUT_FAILED, is_authenticated=False, user=None)
            return
        self._set_state(is_authenticated=False, user=None, is_loading=False)

    async def get_access_token(self) -> Optional[str]:
        """Return a usable access token, or None.

        When the session turns out to be gone (refresh failed), the state is
        resynced to logged out.
        """
        try:
            token = await self._engine.get_access_token()
        except Exception as exc:
            self._fail(exc, AuthErrorCode.TOKEN_EXPIRED)
            return None
        if token is None and self._state.is_authenticated:
            self._set_state(is_authenticated=False, user=None)
        return token

    def has_role(self, role_name: str) -> bool:
        """Case-insensitive role check over the current ``state.user``."""
        return user_has_role(self._state.user, role_name)

    async def refresh(self) -> None:
        """Re-read the session state from the engine."""
        await self.initialize()

    async def validate_session(self) -> bool:
        """Verify the session with the server; resync state when it is invalid."""
        valid = await self._engine.is_authenticated()
        if not valid and self._state.is_authenticated:
            logger.info("blitzware.facade.session_invalidated")
            self._set_state(is_authenticated=False, user=None)
        return valid
