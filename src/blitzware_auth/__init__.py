"""BlitzWare auth: client-side OAuth 2.0 authorization code + PKCE engine.

Public exports:
    AuthProtocolEngine: Login, refresh, validity checks and logout
    AuthStateFacade: Observable AuthState over an engine
    AuthConfig: Client configuration (validate_config for raw mappings)
    AuthError, AuthErrorCode: Error taxonomy
    User, Role, DetailedRole, TokenSet, AuthState: Data model
    has_role, has_any_role, has_all_roles, get_user_roles, display_name:
        Role utilities
"""

__version__ = "0.1.0"

from blitzware_auth.auth.browser import BrowserRedirect, RedirectResult
from blitzware_auth.auth.discovery import DiscoveryDocument, DiscoveryResolver
from blitzware_auth.auth.engine import AuthProtocolEngine
from blitzware_auth.auth.introspection import IntrospectionResult, TokenIntrospector
from blitzware_auth.config import AuthConfig, validate_config
from blitzware_auth.errors import AuthError, AuthErrorCode
from blitzware_auth.facade import AuthStateFacade
from blitzware_auth.models import AuthState, DetailedRole, Role, TokenSet, User
from blitzware_auth.roles import (
    display_name,
    generate_random_string,
    get_user_roles,
    has_all_roles,
    has_any_role,
    has_role,
    is_token_expired,
)
from blitzware_auth.storage import (
    InMemoryLocalStore,
    InMemorySecureStore,
    LocalStore,
    SecureStore,
    SQLiteLocalStore,
)

__all__ = [
    "AuthConfig",
    "AuthError",
    "AuthErrorCode",
    "AuthProtocolEngine",
    "AuthState",
    "AuthStateFacade",
    "BrowserRedirect",
    "DetailedRole",
    "DiscoveryDocument",
    "DiscoveryResolver",
    "InMemoryLocalStore",
    "InMemorySecureStore",
    "IntrospectionResult",
    "LocalStore",
    "RedirectResult",
    "Role",
    "SQLiteLocalStore",
    "SecureStore",
    "TokenIntrospector",
    "TokenSet",
    "User",
    "__version__",
    "display_name",
    "generate_random_string",
    "get_user_roles",
    "has_all_roles",
    "has_any_role",
    "has_role",
    "is_token_expired",
    "validate_config",
]
