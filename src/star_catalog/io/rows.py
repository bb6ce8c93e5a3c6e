"""Row-based JSON catalog files.

File layout::

    {
        "stars": [[source_id, ra_deg, de_deg, distance_ly, vmag, b_v], ...],
        "names": [[source_id, "Name"], ...]
    }

Each star is a positional row rather than an object, so field names are not
repeated tens of thousands of times. ``names`` is optional.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from star_catalog.catalog import Catalog, CatalogBuilder
from star_catalog.config import CatalogConfig
from star_catalog.errors import InvalidArgumentError, InvalidGeometryError
from star_catalog.names import NameMap

logger = logging.getLogger(__name__)


class CatalogLoadError(Exception):
    """Raised when a catalog file cannot be read or is structurally malformed.

    Attributes:
        path: The file that failed to load.
        reason: The underlying error message.
    """

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to load catalog {self.path}: {reason}")


def add_rows_to_builder(
    builder: CatalogBuilder,
    rows: Iterable[Sequence[Any]],
    *,
    skip_invalid: bool = False,
    source: str = "<rows>",
) -> int:
    """Add rows to ``builder``; returns the number skipped.

    With ``skip_invalid`` rows failing geometry or argument checks are
    logged and skipped; otherwise the first such error propagates. Rows
    that are not six-field sequences at all raise CatalogLoadError.
    """
    skipped = 0
    for line, row in enumerate(rows):
        try:
            builder.add_row(row)
        except (InvalidGeometryError, InvalidArgumentError) as exc:
            if not skip_invalid:
                raise
            skipped += 1
            logger.warning("Skipping star row %d of %s: %s", line, source, exc)
        except (TypeError, ValueError) as exc:
            if not skip_invalid:
                raise CatalogLoadError(source, f"malformed star row {line}: {exc}") from exc
            skipped += 1
            logger.warning("Skipping star row %d of %s: %s", line, source, exc)
    return skipped


def parse_rows_payload(
    payload: Any,
    *,
    config: CatalogConfig | None = None,
    skip_invalid: bool = False,
    source: str = "<payload>",
) -> tuple[Catalog, NameMap]:
    """Build a catalog (and its name map) from a decoded rows payload."""
    if not isinstance(payload, dict) or not isinstance(payload.get("stars"), list):
        raise CatalogLoadError(source, "expected an object with a 'stars' list")
    builder = CatalogBuilder(config)
    add_rows_to_builder(builder, payload["stars"], skip_invalid=skip_invalid, source=source)
    catalog = builder.build()

    raw_names = payload.get("names", [])
    if not isinstance(raw_names, list):
        raise CatalogLoadError(source, "'names' must be a list of [source_id, name] pairs")
    try:
        aliases = [(int(sid), str(name)) for sid, name in raw_names]
    except (TypeError, ValueError) as exc:
        raise CatalogLoadError(source, f"malformed 'names' entry: {exc}") from exc
    return catalog, NameMap.from_aliases(catalog, aliases, ignore_not_found=True)


def read_rows_json(
    path: str | Path,
    *,
    config: CatalogConfig | None = None,
    skip_invalid: bool = False,
) -> tuple[Catalog, NameMap]:
    """Load a row-based JSON catalog file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogLoadError(path, str(exc)) from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogLoadError(path, f"malformed JSON: {exc}") from exc
    return parse_rows_payload(payload, config=config, skip_invalid=skip_invalid, source=str(path))


def catalog_to_payload(catalog: Catalog, names: NameMap | None = None) -> dict[str, Any]:
    return {
        "stars": [list(s.to_row()) for s in catalog],
        "names": [list(pair) for pair in names.to_aliases(catalog)] if names else [],
    }


def write_rows_json(catalog: Catalog, path: str | Path, names: NameMap | None = None) -> Path:
    """Write ``catalog`` (and optional names) as compact row-based JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(catalog_to_payload(catalog, names), separators=(",", ":"))
    path.write_text(text + "\n", encoding="utf-8")
    return path


__all__ = [
    "CatalogLoadError",
    "add_rows_to_builder",
    "catalog_to_payload",
    "parse_rows_payload",
    "read_rows_json",
    "write_rows_json",
]
