"""Compact binary catalog files (numpy ``.npz``).

Columns are stored as separate arrays: ``source_id`` (int64, -1 for stars
without one), ``ra``, ``de``, ``distance``, ``magnitude``, ``color_index``
(float64), plus ``name_ids``/``name_strings`` for the name map. Files are
loaded with ``allow_pickle=False``.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from star_catalog.catalog import Catalog, CatalogBuilder
from star_catalog.config import CatalogConfig
from star_catalog.io.rows import CatalogLoadError, add_rows_to_builder
from star_catalog.names import NameMap

COLUMNS = ("source_id", "ra", "de", "distance", "magnitude", "color_index")
NO_SOURCE_ID = -1


def write_npz(catalog: Catalog, path: str | Path, names: NameMap | None = None) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    stars = list(catalog)
    aliases = names.to_aliases(catalog) if names else []
    with path.open("wb") as handle:
        np.savez_compressed(
            handle,
            source_id=np.array(
                [NO_SOURCE_ID if s.source_id is None else s.source_id for s in stars],
                dtype=np.int64,
            ),
            ra=np.array([s.ra for s in stars], dtype=np.float64),
            de=np.array([s.de for s in stars], dtype=np.float64),
            distance=np.array([s.distance for s in stars], dtype=np.float64),
            magnitude=np.array([s.magnitude for s in stars], dtype=np.float64),
            color_index=np.array([s.color_index for s in stars], dtype=np.float64),
            name_ids=np.array([sid for sid, _ in aliases], dtype=np.int64),
            name_strings=np.array([name for _, name in aliases], dtype=np.str_),
        )
    return path


def read_npz(
    path: str | Path,
    *,
    config: CatalogConfig | None = None,
    skip_invalid: bool = False,
) -> tuple[Catalog, NameMap]:
    path = Path(path)
    try:
        with np.load(path, allow_pickle=False) as data:
            missing = [c for c in COLUMNS if c not in data.files]
            if missing:
                raise CatalogLoadError(path, f"missing arrays {missing}")
            columns = [data[c] for c in COLUMNS]
            name_ids = data["name_ids"] if "name_ids" in data.files else np.empty(0, np.int64)
            name_strings = (
                data["name_strings"] if "name_strings" in data.files else np.empty(0, np.str_)
            )
    except (OSError, ValueError) as exc:
        raise CatalogLoadError(path, str(exc)) from exc

    lengths = {len(c) for c in columns}
    if len(lengths) > 1:
        raise CatalogLoadError(path, f"column lengths differ: {sorted(lengths)}")

    rows = (
        (
            None if int(sid) == NO_SOURCE_ID else int(sid),
            float(ra),
            float(de),
            float(dist),
            float(mag),
            float(bv),
        )
        for sid, ra, de, dist, mag, bv in zip(*columns, strict=True)
    )
    builder = CatalogBuilder(config)
    add_rows_to_builder(builder, rows, skip_invalid=skip_invalid, source=str(path))
    catalog = builder.build()
    aliases = [(int(i), str(n)) for i, n in zip(name_ids, name_strings, strict=False)]
    return catalog, NameMap.from_aliases(catalog, aliases, ignore_not_found=True)


__all__ = ["COLUMNS", "NO_SOURCE_ID", "read_npz", "write_npz"]
