"""Reader for the Hipparcos main catalogue in CSV form.

Expects a header row containing at least ``HIP``, ``RAdeg``, ``DEdeg``,
``Plx``, ``Vmag`` and ``B-V`` (as in ``hipparcos-voidmain.csv``). Rows
missing any of these fields are skipped; the full catalogue has 118,218
rows of which about 116,800 are complete.

Distance in light years is ``3261.56 / Plx`` with parallax in
milliarcseconds, e.g. Polaris (Plx 7.56) at 431 ly, Dubhe (Plx 26.38) at
124 ly. Parallaxes giving a non-positive or non-finite distance map to
UNKNOWN_DISTANCE.
"""

from __future__ import annotations

import csv
import logging
import math
from collections.abc import Iterator
from pathlib import Path
from typing import IO

from star_catalog.catalog import Catalog, CatalogBuilder
from star_catalog.config import CatalogConfig
from star_catalog.errors import InvalidArgumentError, InvalidGeometryError
from star_catalog.io.rows import CatalogLoadError
from star_catalog.star import UNKNOWN_DISTANCE

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("HIP", "RAdeg", "DEdeg", "Plx", "Vmag", "B-V")
LY_PER_PARSEC_MILLI = 3261.56


def distance_from_parallax(plx_mas: float) -> float:
    """Light years from a parallax in milliarcseconds."""
    if plx_mas == 0.0:
        return UNKNOWN_DISTANCE
    ly = LY_PER_PARSEC_MILLI / plx_mas
    if not math.isfinite(ly) or ly <= 0.0:
        return UNKNOWN_DISTANCE
    return ly


def iter_hipparcos_rows(
    handle: IO[str], max_magnitude: float | None = None
) -> Iterator[tuple[int, float, float, float, float, float]]:
    """Yield ``(hip, ra, de, distance, vmag, b_v)`` rows for complete records."""
    reader = csv.DictReader(handle)
    missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
    if missing:
        raise CatalogLoadError(getattr(handle, "name", "<stream>"), f"missing columns {missing}")

    for record in reader:
        fields = [(record.get(c) or "").strip() for c in REQUIRED_COLUMNS]
        if not all(fields):
            continue
        try:
            hip = int(fields[0])
            ra, de, plx, vmag, b_v = (float(f) for f in fields[1:])
        except ValueError:
            logger.warning("Skipping unparseable Hipparcos row HIP=%s", fields[0])
            continue
        if max_magnitude is not None and vmag > max_magnitude:
            continue
        yield (hip, ra, de, distance_from_parallax(plx), vmag, b_v)


def read_hipparcos_csv(
    source: str | Path | IO[str],
    max_magnitude: float | None = None,
    *,
    config: CatalogConfig | None = None,
    skip_invalid: bool = False,
) -> Catalog:
    """Build a catalog from a Hipparcos CSV file or open text stream.

    Rows with unusable geometry raise InvalidGeometryError unless
    ``skip_invalid`` is set, in which case they are logged and skipped.
    """
    builder = CatalogBuilder(config)
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            with path.open(encoding="utf-8", newline="") as handle:
                _fill(builder, handle, max_magnitude, skip_invalid)
        except OSError as exc:
            raise CatalogLoadError(path, str(exc)) from exc
    else:
        _fill(builder, source, max_magnitude, skip_invalid)
    return builder.build()


def _fill(
    builder: CatalogBuilder,
    handle: IO[str],
    max_magnitude: float | None,
    skip_invalid: bool,
) -> None:
    for row in iter_hipparcos_rows(handle, max_magnitude):
        try:
            builder.add_row(row)
        except (InvalidGeometryError, InvalidArgumentError) as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping Hipparcos star HIP=%d: %s", row[0], exc)


__all__ = [
    "REQUIRED_COLUMNS",
    "distance_from_parallax",
    "iter_hipparcos_rows",
    "read_hipparcos_csv",
]
