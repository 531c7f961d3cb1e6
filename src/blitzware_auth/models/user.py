"""User and role models.

A role arrives from the server either as a bare string or as an object
with id/name/description. Both shapes are kept as a union and reduced to a
comparable name by role_name().
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import ConfigDict, Field, field_validator

from blitzware_auth.models.base import BlitzWareBaseModel


class DetailedRole(BlitzWareBaseModel):
    """Role object returned by servers that describe roles in full."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    id: Optional[str] = Field(default=None, description="Role identifier")
    name: str = Field(..., description="Role name used for matching")
    description: Optional[str] = Field(default=None, description="Role description")


Role = Union[str, DetailedRole]


def role_name(role: Any) -> Optional[str]:
    """Return the comparable name of a role entry, or None if it has none."""
    if isinstance(role, str):
        return role
    if isinstance(role, DetailedRole):
        return role.name
    if isinstance(role, dict):
        name = role.get("name")
        return name if isinstance(name, str) else None
    return None


class User(BlitzWareBaseModel):
    """Authenticated user as returned by the userinfo endpoint.

    Unknown claims are kept (extra="allow") and round-trip through storage.

    Attributes:
        sub: Stable unique subject identifier.
        email: Email address, if shared.
        name: Full name, if shared.
        username: Username, if shared.
        picture: Avatar URL, if shared.
        roles: Role entries (plain names or detailed role objects); null reads
            as no roles.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    sub: str = Field(..., min_length=1, description="Subject identifier")
    email: Optional[str] = Field(default=None, description="Email address")
    name: Optional[str] = Field(default=None, description="Full name")
    username: Optional[str] = Field(default=None, description="Username")
    picture: Optional[str] = Field(default=None, description="Avatar URL")
    roles: list[Role] = Field(default_factory=list, description="Role entries")

    def role_names(self) -> list[str]:
        """Return the names of all roles, skipping entries without one."""
        names = (role_name(role) for role in self.roles)
        return [name for name in names if name]

    @field_validator("roles", mode="before")
    @classmethod
    def _null_roles_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value
