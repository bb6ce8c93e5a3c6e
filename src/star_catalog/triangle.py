"""Triangle-pattern matching against a catalog.

Given three angular separations measured between stars in a photograph,
find the catalog triples ``(S1, S2, S3)`` with

    |angle(S1, S2) - a| <= tolerance
    |angle(S1, S3) - b| <= tolerance
    |angle(S2, S3) - c| <= tolerance

Each S1 is taken in turn; the partition narrows S2 to the annulus
``a +/- tolerance`` around S1, and S3 to the annulus ``b +/- tolerance``
around S1 intersected with ``c +/- tolerance`` around S2. The work is
roughly proportional to N times the square of the local star density in
those annuli, rather than N**3.

Every match is returned; choosing between ambiguous matches (by
brightness, or with further measurements) is up to the caller.
"""

from __future__ import annotations

import itertools
import logging
import math
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from star_catalog.errors import InvalidArgumentError
from star_catalog.star import CatalogIndex

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from star_catalog.catalog import Catalog
    from star_catalog.star_filter import StarFilter

logger = logging.getLogger(__name__)

Triple = tuple[CatalogIndex, CatalogIndex, CatalogIndex]


class TriangleSymmetry(str, Enum):
    """How the target separations may be assigned to a triangle's sides.

    EXACT: ``a`` is S1-S2, ``b`` is S1-S3, ``c`` is S2-S3.
    PERMUTED: any assignment; every matching ordered triple is returned.
    UNORDERED: any assignment; one triple per star set, in ascending index order.
    """

    EXACT = "exact"
    PERMUTED = "permuted"
    UNORDERED = "unordered"


def _validate(separations: Sequence[float], tolerance: float) -> tuple[float, float, float]:
    if len(separations) != 3:
        raise InvalidArgumentError(
            f"exactly three separations are required, got {len(separations)}",
            separations=list(separations),
        )
    values = tuple(float(s) for s in separations)
    for s in values:
        if not math.isfinite(s) or s < 0 or s > 180.0:
            raise InvalidArgumentError(
                f"separations must be finite and within [0, 180], got {list(values)}",
                separations=list(values),
            )
    if not math.isfinite(tolerance) or tolerance < 0:
        raise InvalidArgumentError(
            f"tolerance must be finite and >= 0, got {tolerance}", tolerance=tolerance
        )
    return values  # type: ignore[return-value]


def _allowed_mask(catalog: Catalog, star_filter: StarFilter | None) -> NDArray[np.bool_]:
    if star_filter is None:
        return np.ones(len(catalog), dtype=bool)
    return np.fromiter((star_filter.matches(s) for s in catalog), dtype=bool, count=len(catalog))


def _search(
    catalog: Catalog,
    a: float,
    b: float,
    c: float,
    tolerance: float,
    allowed: NDArray[np.bool_],
) -> list[tuple[int, int, int]]:
    """Ordered ordinal triples for one assignment of separations, sorted."""
    directions = catalog.directions
    band_c: dict[int, NDArray[np.intp]] = {}

    def band(ordinal: int, target: float) -> NDArray[np.intp]:
        ordinals, _ = catalog.ordinals_within(
            directions[ordinal], target + tolerance, max(target - tolerance, 0.0)
        )
        ordinals = ordinals[allowed[ordinals]]
        return np.sort(ordinals[ordinals != ordinal])

    result: list[tuple[int, int, int]] = []
    for i in np.flatnonzero(allowed).tolist():
        s2_candidates = band(i, a)
        if s2_candidates.size == 0:
            continue
        s3_from_s1 = band(i, b)
        if s3_from_s1.size == 0:
            continue
        for j in s2_candidates.tolist():
            if j not in band_c:
                band_c[j] = band(j, c)
            s3 = np.intersect1d(s3_from_s1, band_c[j], assume_unique=True)
            for k in s3.tolist():
                if k != i and k != j:
                    result.append((i, j, k))
    return result


def find_star_triangles(
    catalog: Catalog,
    separations: Sequence[float],
    tolerance: float,
    star_filter: StarFilter | None = None,
    symmetry: TriangleSymmetry = TriangleSymmetry.EXACT,
) -> list[Triple]:
    """Find catalog triples whose pairwise separations match ``separations``.

    Args:
        catalog: The catalog to search.
        separations: Target angles ``(a, b, c)`` in degrees for sides
            S1-S2, S1-S3 and S2-S3.
        tolerance: Maximum absolute error in degrees for each side.
        star_filter: Restricts all three stars to those the filter's
            predicate accepts (e.g. ``StarFilter.brighter_than(5.0)`` for
            what a photograph could capture). Its selection policy picks
            among stars, not triples, and is not applied; slice the
            returned list instead.
        symmetry: How separations may be assigned to sides.

    Returns:
        Index triples in increasing S1, then S2, then S3 order. Empty when
        nothing matches.

    Raises:
        InvalidArgumentError: For negative, non-finite or >180 separations,
            or a negative or non-finite tolerance. Raised before searching.
    """
    a, b, c = _validate(separations, tolerance)
    symmetry = TriangleSymmetry(symmetry)
    if len(catalog) < 3:
        return []

    allowed = _allowed_mask(catalog, star_filter)
    if symmetry is TriangleSymmetry.EXACT:
        assignments = [(a, b, c)]
    else:
        assignments = sorted(set(itertools.permutations((a, b, c))))

    found: set[tuple[int, int, int]] = set()
    for sa, sb, sc in assignments:
        found.update(_search(catalog, sa, sb, sc, tolerance, allowed))
    if symmetry is TriangleSymmetry.UNORDERED:
        found = {tuple(sorted(t)) for t in found}  # type: ignore[misc]

    logger.debug(
        "Triangle search %s +/- %s (%s): %d matches",
        (a, b, c),
        tolerance,
        symmetry.value,
        len(found),
    )
    return [
        (CatalogIndex(i), CatalogIndex(j), CatalogIndex(k)) for i, j, k in sorted(found)
    ]


def triangle_angles(catalog: Catalog, triple: Sequence[CatalogIndex]) -> tuple[float, float, float]:
    """Measured separations (S1-S2, S1-S3, S2-S3) in degrees of a result triple."""
    s1, s2, s3 = (catalog.lookup(i) for i in triple)
    return (s1.angle_to(s2), s1.angle_to(s3), s2.angle_to(s3))


__all__ = ["TriangleSymmetry", "Triple", "find_star_triangles", "triangle_angles"]
