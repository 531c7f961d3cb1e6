"""BlitzWare auth testing utilities.

This package provides test doubles and pytest fixtures for exercising the
auth engine without a real authorization server or browser.

Modules:
    mocks: MockAuthorizationServer (httpx MockTransport handler),
           ScriptedBrowser and FrozenClock.
    fixtures: Pytest fixtures (mock_server, browser, frozen_clock, engine, ...)
              and the logged_in_engine() context manager.

Example:
    >>> from blitzware_auth.testing import MockAuthorizationServer, ScriptedBrowser
    >>> from blitzware_auth.testing.fixtures import build_engine
"""

from blitzware_auth.testing.mocks import FrozenClock, MockAuthorizationServer, ScriptedBrowser

__all__ = [
    "FrozenClock",
    "MockAuthorizationServer",
    "ScriptedBrowser",
]
