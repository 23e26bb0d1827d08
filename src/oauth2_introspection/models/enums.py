"""Enumerations for introspection outcomes and authentication results."""

from enum import Enum


class OutcomeKind(str, Enum):
    """Result kinds of one call to the introspection endpoint.

    Example:
        >>> OutcomeKind.ACTIVE.value
        'active'
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"


class ResultKind(str, Enum):
    """Terminal states of one ``authenticate`` call.

    SKIP means the scheme declined the request (no token, or a token the
    options say to ignore); it is not a failure.
    """

    SKIP = "skip"
    SUCCESS = "success"
    FAIL = "fail"


class ClaimValueType(str, Enum):
    """JSON type a claim value was rendered from."""

    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    JSON = "json"
