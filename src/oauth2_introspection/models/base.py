"""Base Pydantic model configuration for introspection models.

All value objects inherit from IntrospectionModel:
- Immutability (frozen=True) so shared outcomes cannot be mutated by one waiter
- Strict validation (extra="forbid") to catch typos and invalid fields
- Flexible field naming (populate_by_name=True) for alias support
"""

from pydantic import BaseModel, ConfigDict


class IntrospectionModel(BaseModel):
    """Base model for claims, outcomes and other introspection values.

    Example:
        >>> class Pair(IntrospectionModel):
        ...     left: str
        ...     right: str
        >>> Pair(left="a", right="b") == Pair(left="a", right="b")
        True
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        validate_default=True,
    )
