"""Tests for the browser redirect contract and callback parsing."""

from blitzware_auth.auth.browser import BrowserRedirect, RedirectResult
from blitzware_auth.testing import MockAuthorizationServer, ScriptedBrowser


class TestRedirectResultFromCallbackUrl:
    """Tests for RedirectResult.from_callback_url."""

    def test_success_with_code_and_state(self) -> None:
        result = RedirectResult.from_callback_url("app://cb?code=abc&state=xyz")

        assert result.type == "success"
        assert result.code == "abc"
        assert result.state == "xyz"
        assert result.error is None

    def test_fragment_parameters(self) -> None:
        result = RedirectResult.from_callback_url("app://cb#code=abc&state=xyz")

        assert result.type == "success"
        assert result.code == "abc"

    def test_error_with_description(self) -> None:
        result = RedirectResult.from_callback_url(
            "app://cb?error=access_denied&error_description=User+denied&state=xyz"
        )

        assert result.type == "error"
        assert result.error == "access_denied: User denied"
        assert result.code is None

    def test_missing_code_is_error(self) -> None:
        result = RedirectResult.from_callback_url("app://cb?state=xyz")

        assert result.type == "error"
        assert result.error == "Redirect carried no authorization code"


class TestScriptedBrowser:
    """Tests for the ScriptedBrowser test double."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(ScriptedBrowser(), BrowserRedirect)

    async def test_cancel_and_dismiss(self) -> None:
        assert (await ScriptedBrowser(outcome="cancel").authorize("u", "app://cb")).type == "cancel"
        assert (await ScriptedBrowser(outcome="dismiss").authorize("u", "app://cb")).type == "dismiss"

    async def test_success_echoes_state(self) -> None:
        server = MockAuthorizationServer()
        browser = ScriptedBrowser(server)

        result = await browser.authorize(
            f"{server.base_url}/authorize?state=s1&code_challenge=ch", "app://cb"
        )

        assert result.type == "success"
        assert result.state == "s1"
        assert result.code
        assert browser.opened == [f"{server.base_url}/authorize?state=s1&code_challenge=ch"]
