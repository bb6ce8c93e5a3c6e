"""Star catalog: an immutable, spatially indexed sequence of stars.

Catalogs are produced by a CatalogBuilder. Stars are appended (and
optionally filtered) on the builder; ``build()`` assigns catalog indices,
builds the subcube partition exactly once and returns a read-only Catalog.
A built Catalog has no mutation methods and may be queried from many
threads at once.

Usage:
    >>> from star_catalog.geometry import to_direction
    >>> builder = CatalogBuilder()
    >>> builder.add_star(37.95, 89.26, distance=431.0, magnitude=1.97, color_index=0.64)
    CatalogIndex(0)
    >>> catalog = builder.build()
    >>> catalog.find_closest(to_direction(38.0, 89.0)).id
    CatalogIndex(0)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

import numpy as np

from star_catalog.config import CatalogConfig
from star_catalog.errors import (
    BuildPreconditionError,
    EmptyCatalogError,
    InvalidArgumentError,
    StarNotFoundError,
)
from star_catalog.geometry import Vec3, angular_separations, normalize
from star_catalog.star import UNKNOWN_DISTANCE, CatalogIndex, Star
from star_catalog.star_filter import ANGLE_EPSILON, StarFilter
from star_catalog.subcube import SubcubePartition
from star_catalog.triangle import TriangleSymmetry, find_star_triangles

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from star_catalog.names import NameMap

logger = logging.getLogger(__name__)

StarRow = tuple[int | None, float, float, float, float, float]


class CatalogBuilder:
    """Collects stars during the load phase and builds a Catalog once.

    Thread Safety:
        This class is NOT thread-safe. Loading must complete before
        ``build()``; the returned Catalog is safe for concurrent reads.
    """

    def __init__(self, config: CatalogConfig | None = None) -> None:
        self._config = config or CatalogConfig()
        self._stars: list[Star] = []
        self._built = False

    def __len__(self) -> int:
        return len(self._stars)

    def _check_open(self) -> None:
        if self._built:
            raise BuildPreconditionError("CatalogBuilder has already been built")

    def add_star(
        self,
        ra: float,
        de: float,
        distance: float = UNKNOWN_DISTANCE,
        magnitude: float = 0.0,
        color_index: float = 0.0,
        source_id: int | None = None,
    ) -> CatalogIndex:
        """Append a star; RA/Dec in degrees.

        Returns:
            The provisional index of the star. Indices are final unless
            ``retain`` later drops stars.

        Raises:
            InvalidGeometryError: If RA or Dec is not finite. The builder
                is unchanged, so the caller may skip the record and go on.
            InvalidArgumentError: If distance or magnitude is malformed.
        """
        self._check_open()
        index = CatalogIndex(len(self._stars))
        star = Star(
            id=index,
            ra=float(ra),
            de=float(de),
            distance=float(distance),
            magnitude=float(magnitude),
            color_index=float(color_index),
            source_id=None if source_id is None else int(source_id),
        )
        self._stars.append(star)
        return index

    def add_row(self, row: Sequence[float | int | None]) -> CatalogIndex:
        """Append a ``(source_id, ra, de, distance, magnitude, color_index)`` row."""
        if len(row) != 6:
            raise InvalidArgumentError(f"star row must have 6 fields, got {len(row)}", row=list(row))
        source_id, ra, de, distance, magnitude, color_index = row
        return self.add_star(
            ra,  # type: ignore[arg-type]
            de,  # type: ignore[arg-type]
            distance=distance,  # type: ignore[arg-type]
            magnitude=magnitude,  # type: ignore[arg-type]
            color_index=color_index,  # type: ignore[arg-type]
            source_id=None if source_id is None else int(source_id),
        )

    def add_rows(self, rows: Iterable[Sequence[float | int | None]]) -> int:
        count = 0
        for row in rows:
            self.add_row(row)
            count += 1
        return count

    def retain(self, star_filter: StarFilter) -> int:
        """Keep only stars accepted by ``star_filter``'s predicate; returns number dropped."""
        self._check_open()
        before = len(self._stars)
        kept = [s for s in self._stars if star_filter.matches(s)]
        self._stars = [_renumbered(s, i) for i, s in enumerate(kept)]
        return before - len(self._stars)

    def build(self, resolution: int | None = None) -> Catalog:
        """Apply the configured magnitude cut, build the partition and freeze the catalog."""
        self._check_open()
        if self._config.max_magnitude is not None:
            self.retain(StarFilter.brighter_than(self._config.max_magnitude))
        resolution = self._config.grid_resolution if resolution is None else resolution

        stars = tuple(self._stars)
        directions = _directions_of(stars)
        partition = SubcubePartition.build(directions, resolution)
        self._built = True
        self._stars = []
        logger.debug("Built catalog with %d stars (resolution %d)", len(stars), resolution)
        return Catalog(stars, partition, directions)


def _renumbered(star: Star, ordinal: int) -> Star:
    if star.id.value == ordinal:
        return star
    return Star(
        id=CatalogIndex(ordinal),
        ra=star.ra,
        de=star.de,
        distance=star.distance,
        magnitude=star.magnitude,
        color_index=star.color_index,
        source_id=star.source_id,
    )


def _directions_of(stars: Sequence[Star]) -> NDArray[np.float64]:
    directions = np.array([s.direction for s in stars], dtype=np.float64).reshape(len(stars), 3)
    directions.flags.writeable = False
    return directions


class Catalog:
    """Read-only star catalog with identifier, nearest, cone and triangle queries.

    Attributes:
        partition: The subcube spatial partition built over the stars.
        directions: Read-only Nx3 array of unit direction vectors, row i
            belonging to CatalogIndex i.
    """

    def __init__(
        self,
        stars: Sequence[Star],
        partition: SubcubePartition,
        directions: NDArray[np.float64] | None = None,
    ) -> None:
        stars = tuple(stars)
        if len(partition) != len(stars):
            raise BuildPreconditionError(
                f"partition covers {len(partition)} stars but catalog has {len(stars)}"
            )
        for i, s in enumerate(stars):
            if s.id.value != i:
                raise BuildPreconditionError(f"star at position {i} has index {s.id.value}")
        self._stars = stars
        self.partition = partition
        self.directions = _directions_of(stars) if directions is None else directions
        self._by_source_id: dict[int, int] = {}
        for i, s in enumerate(stars):
            if s.source_id is not None:
                self._by_source_id.setdefault(s.source_id, i)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Sequence[float | int | None]],
        config: CatalogConfig | None = None,
    ) -> Catalog:
        builder = CatalogBuilder(config)
        builder.add_rows(rows)
        return builder.build()

    # ------------------------------------------------------------------
    # Sequence access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._stars)

    def __iter__(self) -> Iterator[Star]:
        return iter(self._stars)

    def __getitem__(self, index: CatalogIndex | int) -> Star:
        return self.lookup(index)

    def __repr__(self) -> str:
        return f"Catalog({len(self._stars)} stars, resolution={self.partition.resolution})"

    def is_empty(self) -> bool:
        return not self._stars

    def lookup(self, index: CatalogIndex | int) -> Star:
        """Return the star for an index in O(1).

        Raises:
            StarNotFoundError: If the index is out of range for this catalog.
        """
        if isinstance(index, CatalogIndex):
            ordinal = index.value
        elif isinstance(index, int) and not isinstance(index, bool):
            ordinal = index
        else:
            raise InvalidArgumentError(f"index must be a CatalogIndex or int, got {index!r}")
        if not 0 <= ordinal < len(self._stars):
            raise StarNotFoundError(
                f"No star with index {ordinal} (catalog has {len(self._stars)} stars)",
                index=ordinal,
            )
        return self._stars[ordinal]

    def iter_stars(self, star_filter: StarFilter | None = None) -> Iterator[Star]:
        """Stars in index order, restricted to those ``star_filter`` accepts."""
        if star_filter is None:
            return iter(self._stars)
        return iter(star_filter.apply(list(self._stars)))

    def subset(self, star_filter: StarFilter, resolution: int | None = None) -> Catalog:
        """Independent catalog of the stars accepted by ``star_filter``, renumbered."""
        builder = CatalogBuilder()
        builder.add_rows(s.to_row() for s in self.iter_stars(star_filter))
        return builder.build(self.partition.resolution if resolution is None else resolution)

    # ------------------------------------------------------------------
    # Identifier and name resolution
    # ------------------------------------------------------------------

    def find_source_id(self, source_id: int) -> CatalogIndex:
        """Index of the (first) star carrying a source catalogue id."""
        try:
            return CatalogIndex(self._by_source_id[int(source_id)])
        except KeyError:
            raise StarNotFoundError(
                f"No star with source id {source_id}", source_id=source_id
            ) from None

    def find_name(self, name: str, names: NameMap | None) -> CatalogIndex:
        if names is None:
            raise StarNotFoundError(f"No name map available to resolve {name!r}", name=name)
        index = names.get(name)
        if index is None or index.value >= len(self._stars):
            raise StarNotFoundError(f"No star named {name!r}", name=name)
        return index

    def find_id_or_name(self, token: str, names: NameMap | None = None) -> CatalogIndex:
        """Resolve a token to a star.

        A decimal token is a source catalogue id (``"32349"`` is HIP 32349),
        ``#<n>`` is the raw catalog index ``n``, and anything else is looked
        up as a name in ``names``.
        """
        token = token.strip()
        if token.isdecimal():
            return self.find_source_id(int(token))
        if token.startswith("#") and token[1:].isdecimal():
            ordinal = int(token[1:])
            if ordinal < len(self._stars):
                return CatalogIndex(ordinal)
            raise StarNotFoundError(f"No star with index {ordinal}", token=token)
        return self.find_name(token, names)

    # ------------------------------------------------------------------
    # Geometric queries
    # ------------------------------------------------------------------

    def ordinals_within(
        self, direction: Sequence[float], radius: float, min_radius: float = 0.0
    ) -> tuple[NDArray[np.intp], NDArray[np.float64]]:
        """Raw ordinals and separations of stars in the band [min_radius, radius].

        The partition narrows the search and every candidate is then checked
        by exact angular separation (inclusive at both ends). Results are
        ordered nearest first, ties by ordinal.
        """
        d: Vec3 = normalize(direction)
        ordinals = self.partition.candidate_ordinals(d, radius, min_radius)
        if ordinals.size == 0:
            return ordinals, np.empty(0, dtype=np.float64)
        seps = angular_separations(self.directions[ordinals], d)
        keep = (seps <= radius + ANGLE_EPSILON) & (seps >= min_radius - ANGLE_EPSILON)
        ordinals = ordinals[keep]
        seps = seps[keep]
        order = np.lexsort((ordinals, seps))
        return ordinals[order], seps[order]

    def find_closest(self, direction: Sequence[float]) -> Star:
        """Return the star nearest in angle to ``direction`` (ties: lowest index).

        Raises:
            EmptyCatalogError: If the catalog has no stars.
            InvalidArgumentError: If ``direction`` is zero or not finite.
        """
        d = normalize(direction)
        if not self._stars:
            raise EmptyCatalogError()

        radius = self.partition.half_width(self.partition.cell_of(d))
        while True:
            ordinals, seps = self.ordinals_within(d, radius)
            if ordinals.size:
                # Re-query at the best distance so no closer star outside the
                # visited rings can be missed.
                ordinals, seps = self.ordinals_within(d, float(seps[0]))
                return self._stars[int(ordinals[0])]
            if radius >= 180.0:
                raise EmptyCatalogError()
            radius = min(radius * 2.0, 180.0)

    def find_stars_around(
        self,
        direction: Sequence[float],
        radius: float,
        star_filter: StarFilter | None = None,
    ) -> list[Star]:
        """Every star within ``radius`` degrees (inclusive) of ``direction``.

        Results are ordered by increasing separation, then index, and are
        recomputed on every call. ``star_filter``'s predicate is applied to
        the verified stars and its selection policy last, with
        ``direction`` as the reference.

        Raises:
            InvalidArgumentError: If radius is negative or not finite, or the
                direction is zero or not finite.
        """
        d = normalize(direction)
        if not math.isfinite(radius) or radius < 0:
            raise InvalidArgumentError(f"radius must be finite and >= 0, got {radius}", radius=radius)
        ordinals, _ = self.ordinals_within(d, radius)
        stars = [self._stars[i] for i in ordinals.tolist()]
        if star_filter is None:
            return stars
        return star_filter.apply(stars, reference=d)

    def find_star_triangles(
        self,
        separations: Sequence[float],
        tolerance: float,
        star_filter: StarFilter | None = None,
        symmetry: TriangleSymmetry = TriangleSymmetry.EXACT,
    ) -> list[tuple[CatalogIndex, CatalogIndex, CatalogIndex]]:
        """See ``star_catalog.triangle.find_star_triangles``."""
        return find_star_triangles(self, separations, tolerance, star_filter, symmetry)


__all__ = ["Catalog", "CatalogBuilder", "StarRow"]
