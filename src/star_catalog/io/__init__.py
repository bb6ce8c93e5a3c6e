"""Catalog file loaders and writers.

Provides:
- Row-based JSON (``.json``)
- Hipparcos main catalogue CSV (``.csv``)
- Compact numpy binary (``.npz``)

Usage:
    >>> from star_catalog.io import load_catalog
    >>> catalog, names = load_catalog("hipparcos.json", max_magnitude=6.0)
    >>> catalog.lookup(names["Polaris"]).magnitude
    1.97
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from star_catalog.catalog import Catalog
from star_catalog.config import CatalogConfig
from star_catalog.errors import InvalidArgumentError
from star_catalog.io.binary import read_npz, write_npz
from star_catalog.io.hipparcos import read_hipparcos_csv
from star_catalog.io.rows import CatalogLoadError, read_rows_json, write_rows_json
from star_catalog.names import HIP_ALIASES, NameMap

SUPPORTED_EXTENSIONS = (".json", ".csv", ".npz")


def load_catalog(
    path: str | Path,
    max_magnitude: float | None = None,
    config: CatalogConfig | None = None,
    *,
    skip_invalid: bool = False,
) -> tuple[Catalog, NameMap]:
    """Load a catalog file, choosing the format from its extension.

    ``max_magnitude`` overrides the configured magnitude cut. Hipparcos CSV
    files carry no names, so they get names from HIP_ALIASES.

    Raises:
        InvalidArgumentError: For an unsupported extension.
        CatalogLoadError: If the file cannot be read or is malformed.
    """
    path = Path(path)
    config = config or CatalogConfig()
    if max_magnitude is not None:
        config = replace(config, max_magnitude=max_magnitude)

    suffix = path.suffix.lower()
    if suffix == ".json":
        return read_rows_json(path, config=config, skip_invalid=skip_invalid)
    if suffix == ".npz":
        return read_npz(path, config=config, skip_invalid=skip_invalid)
    if suffix == ".csv":
        catalog = read_hipparcos_csv(
            path, config.max_magnitude, config=config, skip_invalid=skip_invalid
        )
        return catalog, NameMap.from_aliases(catalog, HIP_ALIASES)
    raise InvalidArgumentError(
        f"Unknown extension on catalog {path} (supported: {', '.join(SUPPORTED_EXTENSIONS)})",
        path=str(path),
    )


def write_catalog(catalog: Catalog, path: str | Path, names: NameMap | None = None) -> Path:
    """Write a catalog as row JSON or npz, by extension."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        return write_rows_json(catalog, path, names)
    if suffix == ".npz":
        return write_npz(catalog, path, names)
    raise InvalidArgumentError(f"Cannot write catalog as {suffix or 'no extension'}", path=str(path))


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "CatalogLoadError",
    "load_catalog",
    "read_hipparcos_csv",
    "read_npz",
    "read_rows_json",
    "write_catalog",
    "write_npz",
    "write_rows_json",
]
