"""Client configuration for the BlitzWare auth engine.

AuthConfig is immutable for the lifetime of one engine. It can be built
directly or from environment variables:

Environment Variables:
    BLITZWARE_CLIENT_ID: OAuth2 client identifier (required)
    BLITZWARE_REDIRECT_URI: Redirect URI with a scheme, e.g. myapp://callback (required)
    BLITZWARE_RESPONSE_TYPE: "code" (default) or "token"
    BLITZWARE_BASE_URL: Authorization server base URL
    BLITZWARE_HTTP_TIMEOUT: Timeout in seconds applied to every HTTP call
"""

from __future__ import annotations

import os
from typing import Any, Literal, Mapping, Optional

from pydantic import Field, ValidationError, model_validator

from blitzware_auth.errors import ConfigurationError
from blitzware_auth.models.base import BlitzWareBaseModel
from blitzware_auth.observability import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://auth.blitzware.xyz/api/auth"
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0
SCHEME_SEPARATOR = "://"

ENV_CLIENT_ID = "BLITZWARE_CLIENT_ID"
ENV_REDIRECT_URI = "BLITZWARE_REDIRECT_URI"
ENV_RESPONSE_TYPE = "BLITZWARE_RESPONSE_TYPE"
ENV_BASE_URL = "BLITZWARE_BASE_URL"
ENV_HTTP_TIMEOUT = "BLITZWARE_HTTP_TIMEOUT"


def validate_config(config: Optional[Mapping[str, Any]]) -> list[str]:
    """Return every problem found in a raw configuration mapping.

    Never raises; an empty list means the configuration is usable.

    Args:
        config: Mapping with client_id, redirect_uri and optional response_type.

    Returns:
        Human-readable problem descriptions.

    Example:
        >>> validate_config({"client_id": "c1", "redirect_uri": "callback"})
        ['redirect_uri must include a valid scheme (e.g., myapp://callback)']
    """
    if not config:
        return ["Configuration is required"]

    problems: list[str] = []
    client_id = config.get("client_id")
    redirect_uri = config.get("redirect_uri")

    if not client_id or not isinstance(client_id, str) or not client_id.strip():
        problems.append("client_id is required")
    if not redirect_uri or not isinstance(redirect_uri, str):
        problems.append("redirect_uri is required")
    elif SCHEME_SEPARATOR not in redirect_uri:
        problems.append("redirect_uri must include a valid scheme (e.g., myapp://callback)")

    response_type = config.get("response_type", "code")
    if response_type not in ("code", "token"):
        problems.append(f"response_type must be 'code' or 'token', got {response_type!r}")

    return problems


class AuthConfig(BlitzWareBaseModel):
    """Configuration for one AuthProtocolEngine.

    Attributes:
        client_id: OAuth2 public client identifier.
        redirect_uri: Redirect URI registered for the client; must carry a scheme.
        response_type: "code" (authorization code + PKCE) or "token".
        base_url: Authorization server base URL used for discovery and fallbacks.
        http_timeout: Timeout in seconds for every HTTP call.
    """

    client_id: str = Field(..., description="OAuth2 client identifier")
    redirect_uri: str = Field(..., description="Registered redirect URI")
    response_type: Literal["code", "token"] = Field(default="code")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Authorization server base URL")
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT_SECONDS, gt=0)

    @model_validator(mode="after")
    def _check_invariants(self) -> "AuthConfig":
        problems = validate_config(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "response_type": self.response_type,
            }
        )
        if problems:
            raise ValueError("; ".join(problems))
        if self.response_type == "token":
            logger.warning(
                "blitzware.config.implicit_flow",
                message=(
                    'responseType "token" (implicit flow) is less secure on mobile; '
                    'login always uses "code" with PKCE'
                ),
            )
        return self

    @property
    def normalized_base_url(self) -> str:
        return self.base_url.rstrip("/")

    @classmethod
    def create(cls, **values: Any) -> "AuthConfig":
        """Build a config, raising ConfigurationError instead of ValidationError.

        Raises:
            ConfigurationError: If any field is missing or invalid.
        """
        try:
            return cls(**values)
        except ValidationError as exc:
            problems = [_describe_validation_error(err) for err in exc.errors()]
            raise ConfigurationError(problems) from exc

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AuthConfig":
        """Build a config from BLITZWARE_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for tests).

        Raises:
            ConfigurationError: If required variables are missing or invalid.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "client_id": env.get(ENV_CLIENT_ID, "").strip(),
            "redirect_uri": env.get(ENV_REDIRECT_URI, "").strip(),
            "response_type": env.get(ENV_RESPONSE_TYPE, "code").strip().lower() or "code",
            "base_url": env.get(ENV_BASE_URL, DEFAULT_BASE_URL).strip() or DEFAULT_BASE_URL,
        }
        timeout_raw = env.get(ENV_HTTP_TIMEOUT, "").strip()
        if timeout_raw:
            try:
                values["http_timeout"] = float(timeout_raw)
            except ValueError as exc:
                raise ConfigurationError(
                    [f"{ENV_HTTP_TIMEOUT} must be a number, got {timeout_raw!r}"]
                ) from exc
        return cls.create(**values)


def _describe_validation_error(err: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in err.get("loc", ()))
    message = str(err.get("msg", "invalid value"))
    # model_validator errors carry our own message prefixed by pydantic
    message = message.removeprefix("Value error, ")
    return f"{location}: {message}" if location else message
