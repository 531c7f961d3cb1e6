"""Browser redirect contract.

The system browser (or in-app auth session) is an external collaborator:
it shows the authorization URL and waits, possibly indefinitely, for the
redirect back to the app. Dismissal is an ordinary outcome, not an error.
"""

from __future__ import annotations

from typing import Literal, Optional, Protocol, runtime_checkable
from urllib.parse import parse_qsl, urlsplit

from pydantic import Field

from blitzware_auth.models.base import BlitzWareBaseModel

RedirectResultType = Literal["success", "cancel", "dismiss", "error"]


class RedirectResult(BlitzWareBaseModel):
    """Outcome of the interactive authorization step.

    Attributes:
        type: "success" when the redirect carried a code; "cancel"/"dismiss"
            when the user left; "error" when the server returned an error.
        params: Query parameters of the redirect (code, state, error...).
        error: Error code or description when ``type`` is "error".
    """

    type: RedirectResultType = Field(...)
    params: dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = Field(default=None)

    @property
    def code(self) -> Optional[str]:
        return self.params.get("code")

    @property
    def state(self) -> Optional[str]:
        return self.params.get("state")

    @classmethod
    def cancelled(cls) -> "RedirectResult":
        return cls(type="cancel")

    @classmethod
    def dismissed(cls) -> "RedirectResult":
        return cls(type="dismiss")

    @classmethod
    def from_callback_url(cls, url: str) -> "RedirectResult":
        """Parse the redirect URL the browser returned to.

        Parameters are read from the query string, with the fragment as a
        fallback for servers that answer in the fragment.
        """
        parts = urlsplit(url)
        params = dict(parse_qsl(parts.query)) or dict(parse_qsl(parts.fragment))

        error = params.get("error")
        if error:
            description = params.get("error_description")
            return cls(
                type="error",
                params=params,
                error=f"{error}: {description}" if description else error,
            )
        if not params.get("code"):
            return cls(type="error", params=params, error="Redirect carried no authorization code")
        return cls(type="success", params=params)


@runtime_checkable
class BrowserRedirect(Protocol):
    """Shows the authorization page and awaits the redirect back to the app."""

    async def authorize(self, authorization_url: str, redirect_uri: str) -> RedirectResult:
        """Open ``authorization_url`` and return once ``redirect_uri`` is hit or the user leaves."""
        ...
