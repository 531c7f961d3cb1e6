"""Data models for the BlitzWare auth client."""

from blitzware_auth.models.base import BlitzWareBaseModel
from blitzware_auth.models.state import AuthState
from blitzware_auth.models.tokens import TokenSet
from blitzware_auth.models.user import DetailedRole, Role, User, role_name

__all__ = [
    "AuthState",
    "BlitzWareBaseModel",
    "DetailedRole",
    "Role",
    "TokenSet",
    "User",
    "role_name",
]
