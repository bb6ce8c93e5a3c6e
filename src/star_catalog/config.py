"""Catalog configuration."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

ENV_GRID_RESOLUTION = "STAR_CATALOG_GRID_RESOLUTION"
ENV_MAX_MAGNITUDE = "STAR_CATALOG_MAX_MAGNITUDE"
ENV_TRIANGLE_TOLERANCE = "STAR_CATALOG_TRIANGLE_TOLERANCE"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Configuration for building and querying a catalog.

    This dataclass is frozen (immutable) so that one configuration is used
    consistently from load through build and query.

    Attributes
    ----------
    grid_resolution : int
        Number of subcube cells along each side of a cube face. Larger
        values give smaller cells (fewer false candidates) at the cost of
        more cells to enumerate for large radii.
    max_magnitude : float | None
        Stars fainter than this are dropped at load time (default: None,
        keep everything).
    triangle_tolerance : float
        Default angular tolerance in degrees for triangle searches.
    """

    grid_resolution: int = 32
    max_magnitude: float | None = None
    triangle_tolerance: float = 0.06

    def __post_init__(self) -> None:
        if isinstance(self.grid_resolution, bool) or not isinstance(self.grid_resolution, int):
            raise ValueError(f"grid_resolution must be an int, got {self.grid_resolution!r}")
        if self.grid_resolution < 1:
            raise ValueError(f"grid_resolution must be >= 1, got {self.grid_resolution}")
        if self.max_magnitude is not None and not math.isfinite(self.max_magnitude):
            raise ValueError(f"max_magnitude must be finite, got {self.max_magnitude}")
        if not math.isfinite(self.triangle_tolerance) or self.triangle_tolerance < 0:
            raise ValueError(
                f"triangle_tolerance must be finite and >= 0, got {self.triangle_tolerance}"
            )

    @classmethod
    def from_env(cls) -> CatalogConfig:
        """Build a configuration from ``STAR_CATALOG_*`` environment variables.

        Unset variables keep their defaults; malformed values raise ValueError.
        """
        defaults = cls()
        grid = os.getenv(ENV_GRID_RESOLUTION)
        mag = os.getenv(ENV_MAX_MAGNITUDE)
        tol = os.getenv(ENV_TRIANGLE_TOLERANCE)
        return cls(
            grid_resolution=int(grid) if grid else defaults.grid_resolution,
            max_magnitude=float(mag) if mag else defaults.max_magnitude,
            triangle_tolerance=float(tol) if tol else defaults.triangle_tolerance,
        )
