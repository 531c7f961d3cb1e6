"""Base Pydantic model configuration for auth client models.

All models inherit from BlitzWareBaseModel to ensure consistent behavior:
- Immutability (frozen=True) so a resolved document or token set cannot drift
- Strict validation (extra="forbid") to catch typos and invalid fields
- Flexible field naming (populate_by_name=True) for alias support
"""

from pydantic import BaseModel, ConfigDict


class BlitzWareBaseModel(BaseModel):
    """Base model for all auth client entities.

    Example:
        >>> class MyModel(BlitzWareBaseModel):
        ...     name: str
        >>> obj = MyModel(name="test")
        >>> obj.name = "other"  # Raises ValidationError (frozen)
        Traceback (most recent call last):
        ...
        pydantic_core._pydantic_core.ValidationError: ...
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        use_enum_values=False,
        validate_default=True,
    )
