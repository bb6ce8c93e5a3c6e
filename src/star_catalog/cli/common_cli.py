"""Shared helpers for click-based `star-catalog` commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from star_catalog.catalog import Catalog
from star_catalog.geometry import to_ra_de
from star_catalog.star import Star

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_RUNTIME_ERROR = 2
EXIT_LOAD_ERROR = 3
EXIT_NOT_FOUND = 4


class StarCatalogCliError(click.ClickException):
    """Click exception with explicit exit-code control."""

    def __init__(self, message: str, *, exit_code: int = EXIT_INPUT_ERROR) -> None:
        super().__init__(message)
        self.exit_code = int(exit_code)


def dump_json_output(payload: dict[str, Any], out_path: Path | None) -> None:
    """Write JSON payload to file or stdout."""
    text = json.dumps(payload, sort_keys=True, indent=2)
    if out_path is None:
        click.echo(text)
        return
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text + "\n", encoding="utf-8")


def resolve_optional_output_path(output_arg: str | None) -> Path | None:
    """Map '-', empty, or None to stdout; otherwise return filesystem path."""
    if output_arg is None:
        return None
    value = str(output_arg).strip()
    if value in {"", "-"}:
        return None
    return Path(value)


def star_payload(
    star: Star, *, names: list[str] | None = None, separation: float | None = None
) -> dict[str, Any]:
    """JSON-friendly view of a star."""
    payload: dict[str, Any] = {
        "index": star.id.to_raw(),
        "source_id": star.source_id,
        "ra_deg": star.ra,
        "dec_deg": star.de,
        "distance_ly": star.distance,
        "magnitude": star.magnitude,
        "color_index": star.color_index,
    }
    if names:
        payload["names"] = names
    if separation is not None:
        payload["separation_deg"] = separation
    return payload


def direction_payload(direction: tuple[float, float, float]) -> dict[str, float]:
    ra, de = to_ra_de(direction)
    return {"ra_deg": ra, "dec_deg": de}


def catalog_summary(catalog: Catalog) -> dict[str, Any]:
    partition = catalog.partition
    return {
        "n_stars": len(catalog),
        "grid_resolution": partition.resolution,
        "n_cells": partition.num_cells,
        "n_occupied_cells": sum(1 for _ in partition.occupied_cells()),
    }
