"""structlog setup for the BlitzWare auth client.

Log lines are rendered as colored console output by default or as JSON
when BLITZWARE_LOG_FORMAT=json. Every event passes through a redaction
processor, so token, secret and verifier values never reach a handler even
when a caller passes them by mistake.

Environment Variables:
    BLITZWARE_LOG_FORMAT: "json" or "console"
    BLITZWARE_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR
    BLITZWARE_SERVICE_NAME: Value bound as ``service`` on every event
    BLITZWARE_DEBUG: "true"/"1" attaches stack traces to swallowed errors

Example:
    >>> configure_logging(log_format="json", log_level="DEBUG")
    >>> get_logger(__name__).info("blitzware.auth.login_succeeded", sub="user_123")
"""

import logging
import os
import sys
from typing import Any, MutableMapping

import structlog
from structlog.typing import Processor

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "console"
DEFAULT_SERVICE_NAME = "blitzware-auth"

ENV_LOG_FORMAT = "BLITZWARE_LOG_FORMAT"
ENV_LOG_LEVEL = "BLITZWARE_LOG_LEVEL"
ENV_SERVICE_NAME = "BLITZWARE_SERVICE_NAME"
ENV_DEBUG = "BLITZWARE_DEBUG"

REDACTED_PLACEHOLDER = "***REDACTED***"

_SENSITIVE_FRAGMENTS = ("token", "secret", "verifier", "password", "authorization")
# Metadata about a token, not the token itself
_SAFE_KEYS = frozenset({"event", "token_type", "token_type_hint"})

_TRUTHY = frozenset({"true", "1", "yes", "on"})

_configured = False


def _redacts(key: str) -> bool:
    if key in _SAFE_KEYS:
        return False
    lowered = key.lower()
    return any(fragment in lowered for fragment in _SENSITIVE_FRAGMENTS)


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return sanitize_for_logging(value)
    if isinstance(value, list):
        return [_redact(item) for item in value]
    return value


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with credential-bearing values replaced.

    A key is credential-bearing when it contains token, secret, verifier,
    password or authorization (case-insensitive); ``token_type`` and
    ``token_type_hint`` are left alone. Nested dicts and lists are walked.

    Example:
        >>> sanitize_for_logging({"access_token": "eyJ...", "expires_in": 3600})
        {'access_token': '***REDACTED***', 'expires_in': 3600}
    """
    return {
        key: REDACTED_PLACEHOLDER if _redacts(key) else _redact(value)
        for key, value in (data or {}).items()
    }


def redact_credentials(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor applying sanitize_for_logging to every event."""
    for key in list(event_dict):
        if _redacts(key):
            event_dict[key] = REDACTED_PLACEHOLDER
        else:
            event_dict[key] = _redact(event_dict[key])
    return event_dict


def is_debug_mode() -> bool:
    """True when BLITZWARE_DEBUG holds a truthy value."""
    return os.environ.get(ENV_DEBUG, "").strip().lower() in _TRUTHY


def _processor_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_credentials,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Install the structlog pipeline and a stdout handler on the root logger.

    Arguments left as None are read from the environment. Subsequent calls
    are no-ops unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return

    log_format = (log_format or os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT)).lower()
    log_level = (log_level or os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)).upper()
    service_name = service_name or os.environ.get(ENV_SERVICE_NAME, DEFAULT_SERVICE_NAME)

    chain = _processor_chain()
    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.getLevelName(log_level))

    structlog.contextvars.bind_contextvars(service=service_name)
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger for ``name``, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    return structlog.stdlib.get_logger(name)
