"""Local error taxonomy for star-catalog.

The catalog core has no runtime or tool framework dependencies. We keep a
small, stable error enum/envelope that downstream applications (the CLI,
for example) can translate into their own error formats, plus one
exception class per error kind.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    INVALID_GEOMETRY = "INVALID_GEOMETRY"
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    BUILD_PRECONDITION = "BUILD_PRECONDITION"


class ErrorEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: ErrorType
    message: str
    context: dict[str, Any] = Field(default_factory=dict)


def make_error(error_type: ErrorType, message: str, **context: Any) -> ErrorEnvelope:
    return ErrorEnvelope(type=error_type, message=message, context=dict(context))


class StarCatalogError(Exception):
    """Base class for all errors raised by the catalog core.

    Attributes:
        error_type: The ErrorType kind of this error.
        context: Failing inputs, suitable for reporting.
    """

    error_type: ErrorType = ErrorType.INVALID_ARGUMENT

    def __init__(self, message: str, **context: Any) -> None:
        self.context = dict(context)
        super().__init__(message)

    def to_envelope(self) -> ErrorEnvelope:
        """Return the error as a serializable envelope."""
        return make_error(self.error_type, str(self), **self.context)


class InvalidGeometryError(StarCatalogError, ValueError):
    """Raised when a right ascension or declination is not representable."""

    error_type = ErrorType.INVALID_GEOMETRY


class StarNotFoundError(StarCatalogError, LookupError):
    """Raised when an identifier, name or closest star cannot be resolved."""

    error_type = ErrorType.NOT_FOUND


class EmptyCatalogError(StarNotFoundError):
    """Raised when a query needs at least one star but the catalog has none."""

    def __init__(self, message: str = "Catalog contains no stars", **context: Any) -> None:
        super().__init__(message, **context)


class InvalidArgumentError(StarCatalogError, ValueError):
    """Raised for malformed query parameters, before any search work starts."""

    error_type = ErrorType.INVALID_ARGUMENT


class BuildPreconditionError(StarCatalogError, RuntimeError):
    """Raised when the build-then-query ordering of a catalog is violated.

    This is a programming error, not a recoverable runtime condition.
    """

    error_type = ErrorType.BUILD_PRECONDITION


__all__ = [
    "BuildPreconditionError",
    "EmptyCatalogError",
    "ErrorEnvelope",
    "ErrorType",
    "InvalidArgumentError",
    "InvalidGeometryError",
    "StarCatalogError",
    "StarNotFoundError",
    "make_error",
]
