"""Observability helpers for the BlitzWare auth client.

Structured logging via structlog with JSON output for production and
colored console output for development.

Example:
    >>> from blitzware_auth.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("blitzware.auth.refresh_succeeded", rotated=True)
"""

from blitzware_auth.observability.logging import (
    configure_logging,
    get_logger,
    is_debug_mode,
    redact_credentials,
    sanitize_for_logging,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "is_debug_mode",
    "redact_credentials",
    "sanitize_for_logging",
]
