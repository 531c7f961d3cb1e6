"""Pytest fixtures for BlitzWare auth tests.

Fixtures (load with ``pytest_plugins = ["blitzware_auth.testing.fixtures"]``):
    frozen_clock: FrozenClock starting at a fixed epoch.
    mock_server: MockAuthorizationServer answering under DEFAULT_MOCK_BASE_URL.
    browser: ScriptedBrowser that approves through mock_server.
    secure_store / local_store: Empty in-memory stores.
    auth_config: AuthConfig pointing at mock_server (client_id "c1").
    engine: AuthProtocolEngine wired to all of the above.

Context managers:
    logged_in_engine(): Async context manager yielding an engine after login().
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import pytest

from blitzware_auth.auth.engine import AuthProtocolEngine
from blitzware_auth.config import AuthConfig
from blitzware_auth.storage.local import InMemoryLocalStore
from blitzware_auth.storage.secure import InMemorySecureStore
from blitzware_auth.testing.mocks import (
    DEFAULT_MOCK_BASE_URL,
    DEFAULT_MOCK_CLIENT_ID,
    FrozenClock,
    MockAuthorizationServer,
    ScriptedBrowser,
)

DEFAULT_TEST_REDIRECT_URI = "app://cb"


def build_engine(
    server: MockAuthorizationServer,
    *,
    browser: Optional[ScriptedBrowser] = None,
    clock: Optional[FrozenClock] = None,
    secure_store: Optional[InMemorySecureStore] = None,
    local_store: Optional[InMemoryLocalStore] = None,
) -> AuthProtocolEngine:
    """Build an engine talking to ``server`` through its MockTransport."""
    config = AuthConfig(
        client_id=server.client_id,
        redirect_uri=DEFAULT_TEST_REDIRECT_URI,
        base_url=server.base_url,
    )
    return AuthProtocolEngine(
        config,
        secure_store=secure_store if secure_store is not None else InMemorySecureStore(),
        local_store=local_store if local_store is not None else InMemoryLocalStore(),
        browser=browser if browser is not None else ScriptedBrowser(server),
        transport=server.transport(),
        clock=clock if clock is not None else FrozenClock(),
    )


@pytest.fixture
def frozen_clock() -> FrozenClock:
    """Create a FrozenClock for the test."""
    return FrozenClock()


@pytest.fixture
def mock_server() -> MockAuthorizationServer:
    """Create a fresh MockAuthorizationServer for the test."""
    return MockAuthorizationServer(DEFAULT_MOCK_BASE_URL, DEFAULT_MOCK_CLIENT_ID)


@pytest.fixture
def browser(mock_server: MockAuthorizationServer) -> ScriptedBrowser:
    """Create a ScriptedBrowser that approves through mock_server."""
    return ScriptedBrowser(mock_server)


@pytest.fixture
def secure_store() -> InMemorySecureStore:
    """Create an empty in-memory secure store."""
    return InMemorySecureStore()


@pytest.fixture
def local_store() -> InMemoryLocalStore:
    """Create an empty in-memory local store."""
    return InMemoryLocalStore()


@pytest.fixture
def auth_config(mock_server: MockAuthorizationServer) -> AuthConfig:
    """AuthConfig pointing at mock_server."""
    return AuthConfig(
        client_id=mock_server.client_id,
        redirect_uri=DEFAULT_TEST_REDIRECT_URI,
        base_url=mock_server.base_url,
    )


@pytest.fixture
def engine(
    mock_server: MockAuthorizationServer,
    browser: ScriptedBrowser,
    frozen_clock: FrozenClock,
    secure_store: InMemorySecureStore,
    local_store: InMemoryLocalStore,
) -> AuthProtocolEngine:
    """AuthProtocolEngine wired to the mock server, stores and clock.

    Returns:
        An engine with no stored session.
    """
    return build_engine(
        mock_server,
        browser=browser,
        clock=frozen_clock,
        secure_store=secure_store,
        local_store=local_store,
    )


@asynccontextmanager
async def logged_in_engine(
    server: Optional[MockAuthorizationServer] = None,
) -> AsyncIterator[AuthProtocolEngine]:
    """Async context manager yielding an engine with a completed login.

    On exit the engine is logged out.

    Example:
        >>> async with logged_in_engine() as engine:
        ...     assert await engine.is_authenticated()
    """
    server = server if server is not None else MockAuthorizationServer()
    engine = build_engine(server)
    await engine.login()
    try:
        yield engine
    finally:
        await engine.logout()
