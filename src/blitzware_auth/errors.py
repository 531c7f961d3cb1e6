"""BlitzWare Auth Error Taxonomy.

This module defines the error hierarchy for the auth engine. Every error
raised by the engine is an AuthError carrying a stable code from
AuthErrorCode, so consumers can branch on the kind rather than on message
text.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class AuthErrorCode(str, Enum):
    """Stable error kinds exposed to consumers."""

    CONFIGURATION_ERROR = "configuration_error"
    NETWORK_ERROR = "network_error"
    AUTHENTICATION_FAILED = "authentication_failed"
    TOKEN_EXPIRED = "token_expired"
    REFRESH_FAILED = "refresh_failed"
    LOGOUT_FAILED = "logout_failed"
    USER_INFO_FAILED = "user_info_failed"
    STORAGE_ERROR = "storage_error"
    INTROSPECTION_FAILED = "introspection_failed"
    UNKNOWN_ERROR = "unknown_error"


class AuthError(Exception):
    """Base exception for all auth engine errors.

    Attributes:
        code: Error kind from AuthErrorCode
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(
        self,
        code: AuthErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(AuthError):
    """Raised when the client configuration is malformed.

    Attributes:
        problems: Every validation problem found in the configuration
    """

    def __init__(self, problems: list[str], details: dict[str, Any] | None = None) -> None:
        message = f"Invalid configuration: {'; '.join(problems)}"
        super().__init__(
            code=AuthErrorCode.CONFIGURATION_ERROR,
            message=message,
            details={"problems": list(problems), **(details or {})},
        )
        self.problems = list(problems)


class NetworkError(AuthError):
    """Raised on transport failures or non-2xx responses from exchange calls.

    Attributes:
        endpoint: URL of the call that failed
        status_code: HTTP status when the server answered, None on transport errors
    """

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details_dict: dict[str, Any] = {}
        if endpoint is not None:
            details_dict["endpoint"] = endpoint
        if status_code is not None:
            details_dict["status_code"] = status_code
        if details:
            details_dict.update(details)
        super().__init__(code=AuthErrorCode.NETWORK_ERROR, message=message, details=details_dict)
        self.endpoint = endpoint
        self.status_code = status_code


class AuthenticationFailedError(AuthError):
    """Raised when the interactive login is cancelled, rejected or invalid."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code=AuthErrorCode.AUTHENTICATION_FAILED, message=message, details=details or {}
        )


class TokenExpiredError(AuthError):
    """Raised when no usable access token is available for a call that needs one."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=AuthErrorCode.TOKEN_EXPIRED, message=message, details=details or {})


class RefreshFailedError(AuthError):
    """Raised when the refresh token is absent, inactive, or the exchange failed.

    Always raised after local authentication state has been cleared.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=AuthErrorCode.REFRESH_FAILED, message=message, details=details or {})


class LogoutFailedError(AuthError):
    """Raised when local cleanup during logout itself failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code=AuthErrorCode.LOGOUT_FAILED, message=message, details=details or {})


class UserInfoFailedError(AuthError):
    """Raised when the userinfo endpoint returned an unusable user document."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code=AuthErrorCode.USER_INFO_FAILED, message=message, details=details or {}
        )


class StorageError(AuthError):
    """Raised when a secure-store or local-cache write/delete fails.

    Attributes:
        key: Storage key involved in the failed operation
        operation: "set" or "delete"
    """

    def __init__(
        self,
        key: str,
        operation: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"Storage {operation} failed for '{key}': {reason}"
        super().__init__(
            code=AuthErrorCode.STORAGE_ERROR,
            message=message,
            details={"key": key, "operation": operation, **(details or {})},
        )
        self.key = key
        self.operation = operation


class IntrospectionFailedError(AuthError):
    """Raised on raw introspection transport failure.

    Only surfaced to callers that ask for the raw result; the validity
    helpers translate it into an inactive token.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details_dict: dict[str, Any] = {}
        if status_code is not None:
            details_dict["status_code"] = status_code
        if details:
            details_dict.update(details)
        super().__init__(
            code=AuthErrorCode.INTROSPECTION_FAILED, message=message, details=details_dict
        )
        self.status_code = status_code


_ERROR_CLASSES: dict[AuthErrorCode, type[AuthError]] = {
    AuthErrorCode.AUTHENTICATION_FAILED: AuthenticationFailedError,
    AuthErrorCode.TOKEN_EXPIRED: TokenExpiredError,
    AuthErrorCode.REFRESH_FAILED: RefreshFailedError,
    AuthErrorCode.LOGOUT_FAILED: LogoutFailedError,
    AuthErrorCode.USER_INFO_FAILED: UserInfoFailedError,
}


def normalize_error(error: BaseException, code: AuthErrorCode) -> AuthError:
    """Normalize any exception into an AuthError.

    An AuthError is returned unchanged so the most specific kind survives
    nested calls. Anything else is wrapped under ``code`` with its message
    preserved and the original exception type recorded in details.

    Args:
        error: The exception to normalize.
        code: Kind to use when ``error`` is not already an AuthError.

    Returns:
        An AuthError suitable for raising or storing in observable state.
    """
    if isinstance(error, AuthError):
        return error

    message = str(error) or "Unknown error occurred"
    details = {"cause": type(error).__name__}
    error_cls = _ERROR_CLASSES.get(code)
    if error_cls is not None:
        return error_cls(message, details=details)
    if code is AuthErrorCode.NETWORK_ERROR:
        return NetworkError(message, details=details)
    if code is AuthErrorCode.INTROSPECTION_FAILED:
        return IntrospectionFailedError(message, details=details)
    return AuthError(code=code, message=message, details=details)
