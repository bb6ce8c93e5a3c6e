"""Star catalog with a cube-face spatial index.

Provides:
- Star records and catalog indices
- A subcube spatial partition for cone searches on the sphere
- Identifier, name, nearest-star and cone queries on an immutable Catalog
- Triangle-pattern matching for identifying photographed star fields

Usage:
    >>> from star_catalog import CatalogBuilder, StarFilter, to_direction
    >>> builder = CatalogBuilder()
    >>> builder.add_star(0.0, 0.0, magnitude=1.0)
    CatalogIndex(0)
    >>> catalog = builder.build()
    >>> [s.id for s in catalog.find_stars_around(to_direction(0.5, 0.0), 1.0)]
    [CatalogIndex(0)]
"""

from __future__ import annotations

__version__ = "0.1.0"

from star_catalog.catalog import Catalog, CatalogBuilder
from star_catalog.config import CatalogConfig
from star_catalog.errors import (
    BuildPreconditionError,
    EmptyCatalogError,
    ErrorEnvelope,
    ErrorType,
    InvalidArgumentError,
    InvalidGeometryError,
    StarCatalogError,
    StarNotFoundError,
)
from star_catalog.geometry import angular_separation, to_direction, to_ra_de
from star_catalog.names import HIP_ALIASES, NameMap
from star_catalog.star import UNKNOWN_DISTANCE, CatalogIndex, Star
from star_catalog.star_filter import FilterSelect, KeepClosest, StarFilter
from star_catalog.subcube import Subcube, SubcubePartition
from star_catalog.triangle import TriangleSymmetry, find_star_triangles, triangle_angles

__all__ = [
    "__version__",
    # Core types
    "Catalog",
    "CatalogBuilder",
    "CatalogConfig",
    "CatalogIndex",
    "Star",
    "UNKNOWN_DISTANCE",
    # Geometry
    "angular_separation",
    "to_direction",
    "to_ra_de",
    # Spatial index
    "Subcube",
    "SubcubePartition",
    # Filters
    "FilterSelect",
    "KeepClosest",
    "StarFilter",
    # Triangle search
    "TriangleSymmetry",
    "find_star_triangles",
    "triangle_angles",
    # Names
    "HIP_ALIASES",
    "NameMap",
    # Errors
    "BuildPreconditionError",
    "EmptyCatalogError",
    "ErrorEnvelope",
    "ErrorType",
    "InvalidArgumentError",
    "InvalidGeometryError",
    "StarCatalogError",
    "StarNotFoundError",
]
