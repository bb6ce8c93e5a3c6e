"""Cube-face spatial partition ("subcubes") for cone searches on the sphere.

The sphere is treated as the surface of an enclosing cube. Each of the six
faces is split into an ``n x n`` grid of cells; a direction belongs to the
face whose outward normal it is closest to, and is binned by its gnomonic
projection onto that face. Cells live in a flat arena indexed by
``(face * n + row) * n + col``. Neighbouring cells, including across face
edges and cube corners, are computed arithmetically when needed.

Radius queries return a candidate superset: every star whose direction is
within the radius is included, but so are some that are not. Callers must
verify candidates with an exact angular separation.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from star_catalog.errors import InvalidArgumentError
from star_catalog.geometry import Vec3, angular_separation, normalize
from star_catalog.star import CatalogIndex

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# Per face: (normal axis, normal sign, u axis, u sign, v axis, v sign).
# Order matters: ties in face selection go to the lowest face number.
FACES: tuple[tuple[int, int, int, int, int, int], ...] = (
    (0, 1, 1, 1, 2, 1),  # +x
    (0, -1, 1, -1, 2, 1),  # -x
    (1, 1, 0, -1, 2, 1),  # +y
    (1, -1, 0, 1, 2, 1),  # -y
    (2, 1, 1, 1, 0, -1),  # +z
    (2, -1, 1, 1, 0, 1),  # -z
)
NUM_FACES = len(FACES)

# Slack (degrees) applied to conservative cell bounds.
_BOUND_EPSILON = 1e-9


class Subcube(NamedTuple):
    """One cell of the partition: a face and a (row, col) on its grid."""

    face: int
    row: int
    col: int

    def flat(self, resolution: int) -> int:
        return (self.face * resolution + self.row) * resolution + self.col

    @classmethod
    def of_flat(cls, flat: int, resolution: int) -> Subcube:
        face, rest = divmod(flat, resolution * resolution)
        row, col = divmod(rest, resolution)
        return cls(face, row, col)


def _bin(t: float, resolution: int) -> int:
    i = int(math.floor((t + 1.0) * 0.5 * resolution))
    if i < 0:
        return 0
    if i >= resolution:
        return resolution - 1
    return i


def _face_of(v: Sequence[float]) -> int:
    ax = abs(v[0])
    ay = abs(v[1])
    az = abs(v[2])
    if ax >= ay and ax >= az:
        axis = 0
    elif ay >= az:
        axis = 1
    else:
        axis = 2
    return 2 * axis + (1 if v[axis] < 0 else 0)


def _plane_point(face: int, u: float, v: float, n: float = 1.0) -> Vec3:
    """3D point ``n * normal + u * u_axis + v * v_axis`` for a face."""
    n_axis, n_sign, u_axis, u_sign, v_axis, v_sign = FACES[face]
    p = [0.0, 0.0, 0.0]
    p[n_axis] += n_sign * n
    p[u_axis] += u_sign * u
    p[v_axis] += v_sign * v
    return (p[0], p[1], p[2])


class SubcubePartition:
    """Read-only spatial index over a fixed sequence of star directions.

    Built once with ``SubcubePartition.build``; no mutation methods are
    exposed afterwards.

    Attributes:
        resolution: Cells along each side of a cube face.
        num_cells: Total number of cells (``6 * resolution**2``).

    Example:
        >>> dirs = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
        >>> part = SubcubePartition.build(dirs, resolution=8)
        >>> sorted(part.candidate_ordinals((1.0, 0.0, 0.0), 5.0).tolist())
        [0]
    """

    def __init__(
        self,
        resolution: int,
        cells: tuple[tuple[int, ...], ...],
        num_stars: int,
    ) -> None:
        if resolution < 1:
            raise InvalidArgumentError(f"resolution must be >= 1, got {resolution}")
        if len(cells) != NUM_FACES * resolution * resolution:
            raise InvalidArgumentError(
                f"expected {NUM_FACES * resolution * resolution} cells, got {len(cells)}"
            )
        self.resolution = resolution
        self.num_cells = len(cells)
        self._cells = cells
        self._num_stars = num_stars
        self._centers, self._half_widths = self._cell_geometry(resolution)

    @classmethod
    def build(cls, directions: NDArray[np.floating], resolution: int = 32) -> SubcubePartition:
        """Assign every direction (row of an Nx3 array) to exactly one cell.

        Deterministic and O(N). Row ``i`` is recorded as ordinal ``i``.
        """
        directions = np.asarray(directions, dtype=np.float64)
        if directions.size == 0:
            directions = directions.reshape(0, 3)
        if directions.ndim != 2 or directions.shape[1] != 3:
            raise InvalidArgumentError(
                f"directions must be an Nx3 array, got shape {directions.shape}"
            )
        if isinstance(resolution, bool) or not isinstance(resolution, int) or resolution < 1:
            raise InvalidArgumentError(f"resolution must be an int >= 1, got {resolution!r}")

        flat = cls._assign(directions, resolution)
        buckets: list[list[int]] = [[] for _ in range(NUM_FACES * resolution * resolution)]
        for ordinal, cell in enumerate(flat.tolist()):
            buckets[cell].append(ordinal)
        cells = tuple(tuple(b) for b in buckets)

        partition = cls(resolution, cells, int(directions.shape[0]))
        logger.debug(
            "Built subcube partition: %d stars in %d/%d cells (resolution %d)",
            directions.shape[0],
            sum(1 for c in cells if c),
            len(cells),
            resolution,
        )
        return partition

    @staticmethod
    def _assign(directions: NDArray[np.float64], resolution: int) -> NDArray[np.intp]:
        """Vectorised cell assignment; mirrors ``cell_of`` operation for operation."""
        n_rows = directions.shape[0]
        if n_rows == 0:
            return np.empty(0, dtype=np.intp)
        if not np.all(np.isfinite(directions)):
            raise InvalidArgumentError("directions must be finite")
        lengths = np.sqrt(
            directions[:, 0] * directions[:, 0]
            + directions[:, 1] * directions[:, 1]
            + directions[:, 2] * directions[:, 2]
        )
        if np.any(lengths == 0.0):
            raise InvalidArgumentError("directions must be non-zero")
        directions = directions / lengths[:, None]

        absd = np.abs(directions)
        axis = np.argmax(absd, axis=1)
        rows = np.arange(n_rows)
        faces = 2 * axis + (directions[rows, axis] < 0).astype(np.intp)

        face_table = np.array(FACES, dtype=np.intp)
        ft = face_table[faces]
        n_comp = ft[:, 1] * directions[rows, ft[:, 0]]
        u = (ft[:, 3] * directions[rows, ft[:, 2]]) / n_comp
        v = (ft[:, 5] * directions[rows, ft[:, 4]]) / n_comp

        col = np.clip(np.floor((u + 1.0) * 0.5 * resolution).astype(np.intp), 0, resolution - 1)
        row = np.clip(np.floor((v + 1.0) * 0.5 * resolution).astype(np.intp), 0, resolution - 1)
        return (faces * resolution + row) * resolution + col

    @staticmethod
    def _cell_geometry(resolution: int) -> tuple[list[Vec3], list[float]]:
        """Centre direction and angular half-width (degrees) of every cell.

        The half-width is the largest angle from the centre direction to a
        cell corner; the gnomonic image of a square is bounded by its corners,
        so this bounds every point in the cell.
        """
        centers: list[Vec3] = []
        half_widths: list[float] = []
        step = 2.0 / resolution
        for face in range(NUM_FACES):
            for row in range(resolution):
                v0 = -1.0 + row * step
                v1 = v0 + step
                for col in range(resolution):
                    u0 = -1.0 + col * step
                    u1 = u0 + step
                    center = normalize(_plane_point(face, u0 + step / 2, v0 + step / 2))
                    hw = max(
                        angular_separation(center, normalize(_plane_point(face, uu, vv)))
                        for uu in (u0, u1)
                        for vv in (v0, v1)
                    )
                    centers.append(center)
                    half_widths.append(hw + _BOUND_EPSILON)
        return centers, half_widths

    # ------------------------------------------------------------------
    # Cell accessors
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        """Return number of stars in the partition."""
        return self._num_stars

    def cell_of(self, direction: Sequence[float]) -> Subcube:
        """Return the cell a (not necessarily unit) direction belongs to."""
        d = normalize(direction)
        face = _face_of(d)
        n_axis, n_sign, u_axis, u_sign, v_axis, v_sign = FACES[face]
        n_comp = n_sign * d[n_axis]
        u = (u_sign * d[u_axis]) / n_comp
        v = (v_sign * d[v_axis]) / n_comp
        return Subcube(face, _bin(v, self.resolution), _bin(u, self.resolution))

    def _flat(self, cell: Subcube) -> int:
        face, row, col = cell
        n = self.resolution
        if not (0 <= face < NUM_FACES and 0 <= row < n and 0 <= col < n):
            raise InvalidArgumentError(f"cell {cell} is outside a resolution-{n} partition")
        return (face * n + row) * n + col

    def members(self, cell: Subcube) -> tuple[CatalogIndex, ...]:
        """Catalog indices assigned to a cell (insertion order irrelevant)."""
        return tuple(CatalogIndex(i) for i in self._cells[self._flat(cell)])

    def center(self, cell: Subcube) -> Vec3:
        return self._centers[self._flat(cell)]

    def half_width(self, cell: Subcube) -> float:
        """Angular radius in degrees of a circle around the centre enclosing the cell."""
        return self._half_widths[self._flat(cell)]

    def contains(self, cell: Subcube, direction: Sequence[float]) -> bool:
        return self.cell_of(direction) == cell

    def cells(self) -> Iterator[Subcube]:
        n = self.resolution
        for flat in range(self.num_cells):
            yield Subcube.of_flat(flat, n)

    def occupied_cells(self) -> Iterator[Subcube]:
        n = self.resolution
        for flat, members in enumerate(self._cells):
            if members:
                yield Subcube.of_flat(flat, n)

    # ------------------------------------------------------------------
    # Adjacency
    # ------------------------------------------------------------------

    def neighbors(self, cell: Subcube) -> list[Subcube]:
        """Cells touching ``cell`` (sharing an edge or a corner).

        Off-face neighbours are found by unfolding the grid over the face
        edge onto the adjoining face; at cube corners, where only three
        faces meet, fewer than eight neighbours exist.
        """
        self._flat(cell)
        face, row, col = cell
        n = self.resolution
        step = 2.0 / n
        uc = -1.0 + (col + 0.5) * step
        vc = -1.0 + (row + 0.5) * step

        result: list[Subcube] = []
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                r2 = row + dr
                c2 = col + dc
                if 0 <= r2 < n and 0 <= c2 < n:
                    nb = Subcube(face, r2, c2)
                else:
                    u = uc + dc * step
                    v = vc + dr * step
                    over_u = max(0.0, abs(u) - 1.0)
                    over_v = max(0.0, abs(v) - 1.0)
                    # Fold the overflow around the cube edge onto the next face.
                    p = _plane_point(
                        face,
                        math.copysign(1.0, u) if over_u > 0 else u,
                        math.copysign(1.0, v) if over_v > 0 else v,
                        1.0 - max(over_u, over_v),
                    )
                    nb = self.cell_of(p)
                if nb != cell and nb not in result:
                    result.append(nb)
        return result

    def ring(self, cell: Subcube, k: int) -> list[Subcube]:
        """Cells at exactly ``k`` neighbour steps from ``cell``."""
        if k < 0:
            raise InvalidArgumentError(f"ring distance must be >= 0, got {k}")
        visited = {cell}
        frontier = [cell]
        for _ in range(k):
            next_frontier: list[Subcube] = []
            for c in frontier:
                for nb in self.neighbors(c):
                    if nb not in visited:
                        visited.add(nb)
                        next_frontier.append(nb)
            frontier = next_frontier
            if not frontier:
                break
        return frontier

    # ------------------------------------------------------------------
    # Radius queries
    # ------------------------------------------------------------------

    def cells_within(
        self, direction: Sequence[float], radius: float, min_radius: float = 0.0
    ) -> list[Subcube]:
        """Cells that may hold a direction at angle in [min_radius, radius] from ``direction``.

        Expands ring by ring from the home cell, only through cells whose
        conservative bound may reach within ``radius``; stops when a ring
        holds no such cell.
        """
        d = normalize(direction)
        _check_radii(radius, min_radius)
        n = self.resolution

        if radius >= 180.0:
            return [
                Subcube.of_flat(flat, n)
                for flat in range(self.num_cells)
                if self._reaches(d, flat, min_radius)
            ]

        home = self.cell_of(d)
        visited = {home}
        frontier = [home]
        found: list[Subcube] = []
        while frontier:
            next_frontier: list[Subcube] = []
            for cell in frontier:
                flat = self._flat(cell)
                sep = angular_separation(d, self._centers[flat])
                if sep - self._half_widths[flat] > radius + _BOUND_EPSILON:
                    continue
                if sep + self._half_widths[flat] >= min_radius - _BOUND_EPSILON:
                    found.append(cell)
                for nb in self.neighbors(cell):
                    if nb not in visited:
                        visited.add(nb)
                        next_frontier.append(nb)
            frontier = next_frontier
        return found

    def _reaches(self, d: Vec3, flat: int, min_radius: float) -> bool:
        sep = angular_separation(d, self._centers[flat])
        return sep + self._half_widths[flat] >= min_radius - _BOUND_EPSILON

    def candidate_ordinals(
        self, direction: Sequence[float], radius: float, min_radius: float = 0.0
    ) -> NDArray[np.intp]:
        """Raw ordinals of all stars in cells returned by ``cells_within``."""
        members: list[int] = []
        for cell in self.cells_within(direction, radius, min_radius):
            members.extend(self._cells[self._flat(cell)])
        return np.asarray(members, dtype=np.intp)

    def candidates_within(
        self, direction: Sequence[float], radius: float, min_radius: float = 0.0
    ) -> list[CatalogIndex]:
        """Candidate superset of stars within ``radius`` degrees of ``direction``."""
        return [CatalogIndex(int(i)) for i in self.candidate_ordinals(direction, radius, min_radius)]


def _check_radii(radius: float, min_radius: float) -> None:
    if not math.isfinite(radius) or radius < 0:
        raise InvalidArgumentError(f"radius must be finite and >= 0, got {radius}", radius=radius)
    if not math.isfinite(min_radius) or min_radius < 0:
        raise InvalidArgumentError(
            f"min_radius must be finite and >= 0, got {min_radius}", min_radius=min_radius
        )


__all__ = ["FACES", "NUM_FACES", "Subcube", "SubcubePartition"]
