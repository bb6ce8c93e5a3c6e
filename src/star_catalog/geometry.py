"""Spherical vector geometry for catalog positions.

Directions are unit vectors in the equatorial frame:
- x-axis points to RA=0, Dec=0
- y-axis points to RA=90, Dec=0
- z-axis points to Dec=+90 (north celestial pole)

All angles at this interface are in degrees.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from star_catalog.errors import InvalidArgumentError, InvalidGeometryError

if TYPE_CHECKING:
    from numpy.typing import NDArray

Vec3 = tuple[float, float, float]

DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi


def to_direction(ra: float, de: float) -> Vec3:
    """Convert spherical (RA, Dec) in degrees to a unit direction vector.

    Raises:
        InvalidGeometryError: If either coordinate is NaN or infinite.
    """
    if not (math.isfinite(ra) and math.isfinite(de)):
        raise InvalidGeometryError(
            f"Right ascension and declination must be finite, got ({ra}, {de})",
            ra=ra,
            de=de,
        )
    ra_rad = ra * DEG_TO_RAD
    de_rad = de * DEG_TO_RAD
    cos_de = math.cos(de_rad)
    return (cos_de * math.cos(ra_rad), cos_de * math.sin(ra_rad), math.sin(de_rad))


def to_ra_de(v: Sequence[float]) -> tuple[float, float]:
    """Convert a direction vector back to (RA, Dec) in degrees, RA in [0, 360)."""
    x, y, z = normalize(v)
    ra = math.atan2(y, x) * RAD_TO_DEG
    if ra < 0:
        ra += 360.0
    if ra >= 360.0:
        ra -= 360.0
    de = math.asin(max(-1.0, min(1.0, z))) * RAD_TO_DEG
    return (ra, de)


def normalize(v: Sequence[float]) -> Vec3:
    """Return ``v`` scaled to unit length.

    Raises:
        InvalidArgumentError: If ``v`` is not a finite, non-zero 3-vector.
    """
    if len(v) != 3:
        raise InvalidArgumentError(f"direction must have 3 components, got {len(v)}")
    x, y, z = (float(c) for c in v)
    if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
        raise InvalidArgumentError(f"direction must be finite, got ({x}, {y}, {z})")
    length = math.sqrt(x * x + y * y + z * z)
    if length == 0.0:
        raise InvalidArgumentError("direction must be non-zero")
    return (x / length, y / length, z / length)


def dot(u: Sequence[float], v: Sequence[float]) -> float:
    return u[0] * v[0] + u[1] * v[1] + u[2] * v[2]


def angular_separation(u: Sequence[float], v: Sequence[float]) -> float:
    """Angle in degrees between two unit vectors.

    The dot product is clamped to [-1, 1] before the inverse cosine to
    absorb floating-point overshoot, so the result is always in [0, 180].
    """
    c = max(-1.0, min(1.0, dot(u, v)))
    return math.acos(c) * RAD_TO_DEG


def angular_separations(
    directions: NDArray[np.floating], v: Sequence[float]
) -> NDArray[np.float64]:
    """Vectorised angular_separation of each row of an Nx3 array against ``v``."""
    cosines = np.asarray(directions, dtype=np.float64) @ np.asarray(v, dtype=np.float64)
    return np.degrees(np.arccos(np.clip(cosines, -1.0, 1.0)))


__all__ = [
    "DEG_TO_RAD",
    "RAD_TO_DEG",
    "Vec3",
    "angular_separation",
    "angular_separations",
    "dot",
    "normalize",
    "to_direction",
    "to_ra_de",
]
