from __future__ import annotations

import json
from pathlib import Path

import pytest

from star_catalog.catalog import Catalog
from star_catalog.config import CatalogConfig
from star_catalog.errors import InvalidArgumentError
from star_catalog.io.rows import (
    CatalogLoadError,
    catalog_to_payload,
    parse_rows_payload,
    read_rows_json,
    write_rows_json,
)
from star_catalog.names import NameMap
from star_catalog.star import CatalogIndex


def test_write_then_read_preserves_stars_and_names(
    tmp_path: Path, bright_catalog: Catalog, bright_names: NameMap
) -> None:
    path = write_rows_json(bright_catalog, tmp_path / "nested" / "bright.json", bright_names)
    catalog, names = read_rows_json(path)
    assert [s.to_row() for s in catalog] == [s.to_row() for s in bright_catalog]
    assert dict(names) == dict(bright_names)


def test_payload_layout(bright_catalog: Catalog, bright_names: NameMap) -> None:
    payload = catalog_to_payload(bright_catalog, bright_names)
    assert payload["stars"][0] == [11767, 37.95, 89.26, 431.0, 1.97, 0.64]
    assert [54061, "Dubhe"] in payload["names"]


def test_names_are_optional() -> None:
    catalog, names = parse_rows_payload({"stars": [[7, 10.0, 20.0, 0.0, 3.0, 0.5]]})
    assert len(catalog) == 1 and len(names) == 0
    assert catalog.lookup(CatalogIndex(0)).source_id == 7


def test_names_for_filtered_stars_are_dropped() -> None:
    payload = {
        "stars": [[1, 0.0, 0.0, 1.0, 1.0, 0.0], [2, 5.0, 0.0, 1.0, 9.0, 0.0]],
        "names": [[1, "Bright"], [2, "Faint"]],
    }
    catalog, names = parse_rows_payload(payload, config=CatalogConfig(max_magnitude=6.0))
    assert len(catalog) == 1
    assert list(names) == ["Bright"]


def test_invalid_rows_raise_or_skip() -> None:
    payload = {
        "stars": [
            [1, 0.0, 0.0, 1.0, 1.0, 0.0],
            [2, 0.0, 0.0, 1.0, 1.0],
            [3, "east", 0.0, 1.0, 1.0, 0.0],
            [4, 1.0, 0.0, -5.0, 1.0, 0.0],
            [5, 2.0, 0.0, 1.0, 1.0, 0.0],
        ]
    }
    with pytest.raises(InvalidArgumentError):
        parse_rows_payload(payload)
    catalog, _ = parse_rows_payload(payload, skip_invalid=True)
    assert [s.source_id for s in catalog] == [1, 5]


@pytest.mark.parametrize("row", [7, None, [1, 0.0, 0.0, 1.0, "bright", 0.0]])
def test_malformed_star_row_is_a_load_error(row: object) -> None:
    with pytest.raises(CatalogLoadError) as excinfo:
        parse_rows_payload({"stars": [[1, 0.0, 0.0, 1.0, 1.0, 0.0], row]}, source="stars.json")
    assert excinfo.value.path == "stars.json"
    assert "row 1" in excinfo.value.reason
    catalog, _ = parse_rows_payload({"stars": [row, [2, 5.0, 0.0, 1.0, 1.0, 0.0]]}, skip_invalid=True)
    assert [s.source_id for s in catalog] == [2]


def test_skipped_rows_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    payload = {"stars": [[1, 0.0, 0.0, 1.0, 1.0, 0.0], [2, 0.0, 0.0, 1.0, 1.0]]}
    with caplog.at_level("WARNING", logger="star_catalog.io.rows"):
        parse_rows_payload(payload, skip_invalid=True, source="stars.json")
    skipped = [r for r in caplog.records if r.name == "star_catalog.io.rows"]
    assert len(skipped) == 1
    assert "row 1 of stars.json" in skipped[0].getMessage()


@pytest.mark.parametrize(
    "text",
    ["{not json", "[]", '{"stars": {}}', '{"stars": [], "names": {}}', '{"stars": [], "names": [[1]]}'],
)
def test_malformed_files(tmp_path: Path, text: str) -> None:
    path = tmp_path / "bad.json"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(CatalogLoadError) as excinfo:
        read_rows_json(path)
    assert excinfo.value.path == str(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(CatalogLoadError):
        read_rows_json(tmp_path / "absent.json")


def test_written_json_is_compact(tmp_path: Path, bright_catalog: Catalog) -> None:
    path = write_rows_json(bright_catalog, tmp_path / "c.json")
    text = path.read_text(encoding="utf-8")
    assert ", " not in text
    assert json.loads(text)["names"] == []
