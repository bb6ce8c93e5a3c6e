"""`star-catalog` command line: load a catalog and query it."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import click

from star_catalog import __version__
from star_catalog.catalog import Catalog
from star_catalog.cli.common_cli import (
    EXIT_INPUT_ERROR,
    EXIT_LOAD_ERROR,
    EXIT_NOT_FOUND,
    StarCatalogCliError,
    catalog_summary,
    direction_payload,
    dump_json_output,
    resolve_optional_output_path,
    star_payload,
)
from star_catalog.config import CatalogConfig
from star_catalog.errors import InvalidArgumentError, StarCatalogError, StarNotFoundError
from star_catalog.geometry import to_direction
from star_catalog.io import CatalogLoadError, load_catalog, write_catalog
from star_catalog.names import NameMap
from star_catalog.star_filter import KeepClosest, StarFilter
from star_catalog.triangle import TriangleSymmetry, triangle_angles

logger = logging.getLogger(__name__)


@dataclass
class CliState:
    config: CatalogConfig
    catalog_path: Path | None
    names_path: Path | None
    _loaded: tuple[Catalog, NameMap] | None = None

    def load(self) -> tuple[Catalog, NameMap]:
        if self._loaded is not None:
            return self._loaded
        if self.catalog_path is None:
            raise StarCatalogCliError("Provide --catalog (or STAR_CATALOG_PATH)")
        try:
            catalog, names = load_catalog(self.catalog_path, config=self.config, skip_invalid=True)
        except CatalogLoadError as exc:
            raise StarCatalogCliError(str(exc), exit_code=EXIT_LOAD_ERROR) from exc
        except InvalidArgumentError as exc:
            raise StarCatalogCliError(str(exc), exit_code=EXIT_INPUT_ERROR) from exc
        if self.names_path is not None:
            names = NameMap({**names, **_load_names_file(catalog, self.names_path)})
        logger.info("Loaded %d stars from %s", len(catalog), self.catalog_path)
        self._loaded = (catalog, names)
        return self._loaded


def _load_names_file(catalog: Catalog, path: Path) -> NameMap:
    """Read a JSON list of ``[source_id, name]`` pairs."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise StarCatalogCliError(f"names file not found: {path}") from exc
    except OSError as exc:
        raise StarCatalogCliError(f"Cannot read names file: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise StarCatalogCliError(f"Malformed JSON in names file: {exc}") from exc
    if not isinstance(payload, list):
        raise StarCatalogCliError("names file must be a JSON list of [source_id, name] pairs")
    try:
        aliases = [(int(sid), str(name)) for sid, name in payload]
    except (TypeError, ValueError) as exc:
        raise StarCatalogCliError(f"Malformed names entry: {exc}") from exc
    return NameMap.from_aliases(catalog, aliases, ignore_not_found=True)


def _direction(ra_deg: float, dec_deg: float) -> tuple[float, float, float]:
    try:
        return to_direction(ra_deg, dec_deg)
    except StarCatalogError as exc:
        raise StarCatalogCliError(str(exc), exit_code=EXIT_INPUT_ERROR) from exc


def _names_by_index(names: NameMap) -> dict[int, list[str]]:
    by_index: dict[int, list[str]] = {}
    for name, index in sorted(names.items()):
        by_index.setdefault(index.to_raw(), []).append(name)
    return by_index


@click.group("star-catalog")
@click.version_option(__version__, prog_name="star-catalog")
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="STAR_CATALOG_PATH",
    default=None,
    help="Catalog file (.json, .csv or .npz).",
)
@click.option("--magnitude", type=float, default=None, help="Drop stars fainter than this.")
@click.option(
    "--names",
    "names_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file of [source_id, name] pairs.",
)
@click.option("--grid-resolution", type=int, default=None, help="Subcube cells per face side.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    catalog_path: Path | None,
    magnitude: float | None,
    names_path: Path | None,
    grid_resolution: int | None,
    verbose: bool,
) -> None:
    """Query a star catalog by id, name, position or triangle of separations."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = CatalogConfig.from_env()
        overrides: dict[str, Any] = {}
        if magnitude is not None:
            overrides["max_magnitude"] = magnitude
        if grid_resolution is not None:
            overrides["grid_resolution"] = grid_resolution
        config = replace(config, **overrides)
    except ValueError as exc:
        raise StarCatalogCliError(f"Invalid configuration: {exc}") from exc
    ctx.obj = CliState(config=config, catalog_path=catalog_path, names_path=names_path)


@cli.command("info")
@click.pass_obj
def info_command(state: CliState) -> None:
    """Summarise the loaded catalog."""
    catalog, names = state.load()
    payload = catalog_summary(catalog)
    payload["n_names"] = len(names)
    dump_json_output(payload, None)


@cli.command("list")
@click.option("--out", "output_path_arg", type=str, default="-", show_default=True)
@click.pass_obj
def list_command(state: CliState, output_path_arg: str) -> None:
    """List every star in the catalog."""
    catalog, names = state.load()
    by_index = _names_by_index(names)
    stars = [star_payload(s, names=by_index.get(s.id.to_raw())) for s in catalog]
    dump_json_output({"stars": stars}, resolve_optional_output_path(output_path_arg))


@cli.command("find")
@click.argument("tokens", nargs=-1, required=True)
@click.pass_obj
def find_command(state: CliState, tokens: tuple[str, ...]) -> None:
    """Look up stars by source id, `#<index>` or name.

    Every token is tried; failures are reported and the rest still run.
    """
    catalog, names = state.load()
    by_index = _names_by_index(names)
    found: list[dict[str, Any]] = []
    errors: list[dict[str, Any]] = []
    for token in tokens:
        try:
            star = catalog.lookup(catalog.find_id_or_name(token, names))
        except StarCatalogError as exc:
            envelope = exc.to_envelope()
            click.echo(f"{envelope.type.value}: {token}: {envelope.message}", err=True)
            errors.append({"input": token, **envelope.model_dump(mode="json")})
            continue
        found.append(star_payload(star, names=by_index.get(star.id.to_raw())))

    dump_json_output({"stars": found, "errors": errors}, None)
    if errors:
        raise click.exceptions.Exit(EXIT_NOT_FOUND)


@cli.command("closest")
@click.option("--ra", "ra_deg", type=float, required=True, help="Right ascension in degrees.")
@click.option("--de", "dec_deg", type=float, required=True, help="Declination in degrees.")
@click.pass_obj
def closest_command(state: CliState, ra_deg: float, dec_deg: float) -> None:
    """Find the star nearest to a position."""
    catalog, names = state.load()
    direction = _direction(ra_deg, dec_deg)
    try:
        star = catalog.find_closest(direction)
    except StarNotFoundError as exc:
        raise StarCatalogCliError(str(exc), exit_code=EXIT_NOT_FOUND) from exc
    payload = star_payload(
        star,
        names=_names_by_index(names).get(star.id.to_raw()),
        separation=star.angle_to_direction(direction),
    )
    dump_json_output({"query": direction_payload(direction), "star": payload}, None)


@cli.command("around")
@click.option("--ra", "ra_deg", type=float, required=True, help="Right ascension in degrees.")
@click.option("--de", "dec_deg", type=float, required=True, help="Declination in degrees.")
@click.option("--radius", type=float, required=True, help="Cone radius in degrees.")
@click.option("--brighter-than", type=float, default=None, help="Magnitude ceiling.")
@click.option("--limit", type=int, default=None, help="Keep at most this many results.")
@click.option("--closest", "closest_k", type=int, default=None, help="Keep only the K closest.")
@click.pass_obj
def around_command(
    state: CliState,
    ra_deg: float,
    dec_deg: float,
    radius: float,
    brighter_than: float | None,
    limit: int | None,
    closest_k: int | None,
) -> None:
    """List stars within a cone, nearest first."""
    catalog, names = state.load()
    direction = _direction(ra_deg, dec_deg)
    try:
        star_filter = (
            StarFilter.brighter_than(brighter_than) if brighter_than is not None else StarFilter()
        )
        if closest_k is not None:
            star_filter = star_filter.with_selection(KeepClosest(closest_k))
        stars = catalog.find_stars_around(direction, radius, star_filter)
        if limit is not None:
            stars = StarFilter.select(0, limit).apply(stars)
    except InvalidArgumentError as exc:
        raise StarCatalogCliError(str(exc), exit_code=EXIT_INPUT_ERROR) from exc

    by_index = _names_by_index(names)
    payload = [
        star_payload(
            s, names=by_index.get(s.id.to_raw()), separation=s.angle_to_direction(direction)
        )
        for s in stars
    ]
    dump_json_output(
        {"query": {**direction_payload(direction), "radius_deg": radius}, "stars": payload}, None
    )


@cli.command("triangles")
@click.option(
    "--angles",
    type=float,
    nargs=3,
    required=True,
    help="Separations S1-S2, S1-S3, S2-S3 in degrees.",
)
@click.option("--tolerance", type=float, default=None, help="Tolerance in degrees.")
@click.option(
    "--symmetry",
    type=click.Choice([s.value for s in TriangleSymmetry]),
    default=TriangleSymmetry.EXACT.value,
    show_default=True,
)
@click.option("--brighter-than", type=float, default=None, help="Only consider brighter stars.")
@click.option("--limit", type=int, default=None, help="Report at most this many matches.")
@click.pass_obj
def triangles_command(
    state: CliState,
    angles: tuple[float, float, float],
    tolerance: float | None,
    symmetry: str,
    brighter_than: float | None,
    limit: int | None,
) -> None:
    """Find star triples matching three measured separations."""
    catalog, names = state.load()
    tolerance = state.config.triangle_tolerance if tolerance is None else tolerance
    try:
        star_filter = StarFilter.brighter_than(brighter_than) if brighter_than is not None else None
        matches = catalog.find_star_triangles(
            angles, tolerance, star_filter, TriangleSymmetry(symmetry)
        )
    except InvalidArgumentError as exc:
        raise StarCatalogCliError(str(exc), exit_code=EXIT_INPUT_ERROR) from exc

    by_index = _names_by_index(names)
    reported = matches if limit is None else matches[: max(limit, 0)]
    payload = [
        {
            "stars": [
                star_payload(catalog.lookup(i), names=by_index.get(i.to_raw())) for i in triple
            ],
            "angles_deg": list(triangle_angles(catalog, triple)),
        }
        for triple in reported
    ]
    dump_json_output(
        {
            "query": {"angles_deg": list(angles), "tolerance_deg": tolerance, "symmetry": symmetry},
            "n_matches": len(matches),
            "matches": payload,
        },
        None,
    )


@cli.command("write")
@click.option("--out", "output_path", type=click.Path(dir_okay=False, path_type=Path), required=True)
@click.pass_obj
def write_command(state: CliState, output_path: Path) -> None:
    """Write the (magnitude-filtered) catalog as .json or .npz."""
    catalog, names = state.load()
    try:
        written = write_catalog(catalog, output_path, names)
    except InvalidArgumentError as exc:
        raise StarCatalogCliError(str(exc), exit_code=EXIT_INPUT_ERROR) from exc
    click.echo(f"Wrote {len(catalog)} stars to {written}", err=True)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
