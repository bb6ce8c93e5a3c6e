"""Star records and catalog indices."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from star_catalog.errors import InvalidArgumentError
from star_catalog.geometry import Vec3, angular_separation, dot, to_direction

# Sentinel for stars without a usable parallax.
UNKNOWN_DISTANCE = 0.0


@dataclass(frozen=True, order=True)
class CatalogIndex:
    """Dense, zero-based handle to a star stored in a Catalog.

    Indices are produced by the catalog (and returned from its queries);
    ``from_raw`` / ``to_raw`` exist for serialization and external
    cross-reference tables. An index carries no ownership of the record,
    and an index whose ordinal is out of range for a given catalog fails
    on lookup rather than at construction.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidArgumentError(
                f"CatalogIndex requires an int ordinal, got {self.value!r}", value=repr(self.value)
            )
        if self.value < 0:
            raise InvalidArgumentError(
                f"CatalogIndex ordinal must be >= 0, got {self.value}", value=self.value
            )

    @classmethod
    def from_raw(cls, ordinal: int) -> CatalogIndex:
        return cls(ordinal)

    def to_raw(self) -> int:
        return self.value

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"CatalogIndex({self.value})"


@dataclass(frozen=True)
class Star:
    """Immutable star record.

    Attributes:
        id: Position of the record in its catalog.
        ra: Right ascension in degrees, as supplied.
        de: Declination in degrees, as supplied.
        distance: Distance in light years, UNKNOWN_DISTANCE if unmeasured.
        magnitude: Visual magnitude; lower is brighter.
        color_index: B-V colour index, passed through untouched.
        source_id: Identifier in the source catalogue (e.g. Hipparcos
            number), if any.
        direction: Unit vector derived from ``ra`` and ``de``.
    """

    id: CatalogIndex
    ra: float
    de: float
    distance: float
    magnitude: float
    color_index: float
    source_id: int | None = None
    direction: Vec3 = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", to_direction(self.ra, self.de))
        if not math.isfinite(self.distance) or self.distance < 0:
            raise InvalidArgumentError(
                f"distance must be finite and >= 0, got {self.distance}",
                distance=self.distance,
            )
        if not math.isfinite(self.magnitude):
            raise InvalidArgumentError(
                f"magnitude must be finite, got {self.magnitude}", magnitude=self.magnitude
            )

    def brighter_than(self, magnitude: float) -> bool:
        return self.magnitude <= magnitude

    def cos_angle_between(self, other: Star) -> float:
        return dot(self.direction, other.direction)

    def angle_to(self, other: Star) -> float:
        """Angular separation in degrees between this star and another."""
        return angular_separation(self.direction, other.direction)

    def angle_to_direction(self, direction: Vec3) -> float:
        return angular_separation(self.direction, direction)

    def to_row(self) -> tuple[int | None, float, float, float, float, float]:
        """Serialized form: (source_id, ra, de, distance, magnitude, color_index)."""
        return (self.source_id, self.ra, self.de, self.distance, self.magnitude, self.color_index)


__all__ = ["UNKNOWN_DISTANCE", "CatalogIndex", "Star"]
