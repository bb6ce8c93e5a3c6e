from __future__ import annotations

import pytest

from star_catalog.catalog import Catalog
from star_catalog.errors import StarNotFoundError
from star_catalog.names import HIP_ALIASES, NameMap
from star_catalog.star import CatalogIndex


def test_aliases_resolve_through_source_ids(bright_catalog: Catalog, bright_names: NameMap) -> None:
    assert bright_names["Dubhe"] == CatalogIndex(1)
    assert bright_names["Polaris"] == bright_names["North Star"] == CatalogIndex(0)
    assert len(bright_names) == 4
    assert "Vega" not in bright_names


def test_names_of_lists_every_alias(bright_names: NameMap) -> None:
    assert bright_names.names_of(CatalogIndex(0)) == ["North Star", "Polaris"]
    assert bright_names.names_of(CatalogIndex(4)) == []


def test_missing_alias_is_skipped_by_default(bright_catalog: Catalog) -> None:
    names = NameMap.from_aliases(bright_catalog, [(11767, "Polaris"), (424242, "Nowhere")])
    assert list(names) == ["Polaris"]


def test_missing_alias_can_raise(bright_catalog: Catalog) -> None:
    with pytest.raises(StarNotFoundError):
        NameMap.from_aliases(bright_catalog, [(424242, "Nowhere")], ignore_not_found=False)


def test_to_aliases_round_trip(bright_catalog: Catalog, bright_names: NameMap) -> None:
    aliases = bright_names.to_aliases(bright_catalog)
    assert (11767, "Polaris") in aliases
    assert dict(NameMap.from_aliases(bright_catalog, aliases)) == dict(bright_names)


def test_to_aliases_skips_stars_without_source_id() -> None:
    catalog = Catalog.from_rows([(None, 0.0, 0.0, 1.0, 1.0, 0.0)])
    names = NameMap({"Anonymous": CatalogIndex(0)})
    assert names.to_aliases(catalog) == []


def test_name_map_is_read_only(bright_names: NameMap) -> None:
    with pytest.raises(TypeError):
        bright_names["Vega"] = CatalogIndex(3)  # type: ignore[index]


def test_hipparcos_aliases_table() -> None:
    table = dict((name, hip) for hip, name in HIP_ALIASES)
    assert table["Polaris"] == 11767
    assert table["Sirius"] == 32349
    assert all(isinstance(hip, int) and hip > 0 for hip, _ in HIP_ALIASES)


def test_hipparcos_aliases_against_catalog(bright_catalog: Catalog) -> None:
    names = NameMap.from_aliases(bright_catalog, HIP_ALIASES)
    assert names["Vega"] == CatalogIndex(3)
    assert names["Merak"] == CatalogIndex(4)
