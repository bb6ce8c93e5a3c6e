from __future__ import annotations

import pytest
from pydantic import ValidationError

from star_catalog.errors import (
    BuildPreconditionError,
    EmptyCatalogError,
    ErrorEnvelope,
    ErrorType,
    InvalidArgumentError,
    InvalidGeometryError,
    StarCatalogError,
    StarNotFoundError,
    make_error,
)


def test_make_error_builds_envelope() -> None:
    env = make_error(ErrorType.NOT_FOUND, "missing", token="Betelgeuse")
    assert env.type == ErrorType.NOT_FOUND
    assert env.message == "missing"
    assert env.context == {"token": "Betelgeuse"}
    assert env.model_dump(mode="json")["type"] == "NOT_FOUND"


def test_envelope_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        ErrorEnvelope(type=ErrorType.NOT_FOUND, message="x", extra="nope")  # type: ignore[call-arg]


@pytest.mark.parametrize(
    ("exc_type", "builtin", "error_type"),
    [
        (InvalidGeometryError, ValueError, ErrorType.INVALID_GEOMETRY),
        (StarNotFoundError, LookupError, ErrorType.NOT_FOUND),
        (InvalidArgumentError, ValueError, ErrorType.INVALID_ARGUMENT),
        (BuildPreconditionError, RuntimeError, ErrorType.BUILD_PRECONDITION),
    ],
)
def test_exception_kinds(
    exc_type: type[StarCatalogError], builtin: type[Exception], error_type: ErrorType
) -> None:
    exc = exc_type("boom", value=3)
    assert isinstance(exc, StarCatalogError)
    assert isinstance(exc, builtin)
    env = exc.to_envelope()
    assert env.type == error_type
    assert env.message == "boom"
    assert env.context == {"value": 3}


def test_empty_catalog_is_not_found() -> None:
    exc = EmptyCatalogError()
    assert isinstance(exc, StarNotFoundError)
    assert str(exc) == "Catalog contains no stars"
    assert exc.to_envelope().type == ErrorType.NOT_FOUND
