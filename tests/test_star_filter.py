from __future__ import annotations

import pytest

from star_catalog.catalog import Catalog
from star_catalog.errors import InvalidArgumentError
from star_catalog.geometry import to_direction
from star_catalog.star_filter import FilterSelect, KeepClosest, StarFilter


@pytest.fixture
def row_catalog() -> Catalog:
    # Stars along the equator at RA 0, 5, ..., 45 with magnitudes 0..9.
    return Catalog.from_rows(
        [(i, 5.0 * i, 0.0, 1.0, float(i), 0.0) for i in range(10)]
    )


class TestPredicates:
    def test_all_accepts_everything(self, row_catalog: Catalog) -> None:
        assert len(StarFilter.all().apply(list(row_catalog))) == 10

    def test_brighter_than_is_inclusive(self, row_catalog: Catalog) -> None:
        kept = StarFilter.brighter_than(3.0).apply(list(row_catalog))
        assert [s.magnitude for s in kept] == [0.0, 1.0, 2.0, 3.0]

    def test_within(self, row_catalog: Catalog) -> None:
        kept = StarFilter.within(to_direction(0.0, 0.0), 10.0).apply(list(row_catalog))
        assert [s.source_id for s in kept] == [0, 1, 2]

    def test_then_requires_both(self, row_catalog: Catalog) -> None:
        combined = StarFilter.brighter_than(6.0).then(StarFilter.within(to_direction(25.0, 0.0), 12.0))
        assert [s.source_id for s in combined.apply(list(row_catalog))] == [3, 4, 5, 6]
        assert (StarFilter.brighter_than(6.0) & StarFilter.brighter_than(1.0)).matches(row_catalog[1])
        assert not (StarFilter.brighter_than(6.0) & StarFilter.brighter_than(1.0)).matches(row_catalog[2])

    def test_invalid_arguments(self) -> None:
        with pytest.raises(InvalidArgumentError):
            StarFilter.brighter_than(float("nan"))
        with pytest.raises(InvalidArgumentError):
            StarFilter.within((1.0, 0.0, 0.0), -1.0)
        with pytest.raises(InvalidArgumentError):
            StarFilter.within((0.0, 0.0, 0.0), 1.0)


class TestSelection:
    def test_select_skip_and_limit(self, row_catalog: Catalog) -> None:
        stars = list(row_catalog)
        assert StarFilter.select(skip=3).apply(stars) == stars[3:]
        assert StarFilter.select(limit=2).apply(stars) == stars[:2]
        assert StarFilter.select(skip=8, limit=5).apply(stars) == stars[8:]
        assert StarFilter.select(limit=0).apply(stars) == []

    def test_select_rejects_negative(self) -> None:
        with pytest.raises(InvalidArgumentError):
            FilterSelect(skip=-1)
        with pytest.raises(InvalidArgumentError):
            FilterSelect(limit=-1)

    def test_keep_closest_keeps_incoming_order(self, row_catalog: Catalog) -> None:
        stars = list(row_catalog)
        kept = KeepClosest(3, to_direction(21.0, 0.0)).select(stars)
        assert [s.source_id for s in kept] == [3, 4, 5]

    def test_keep_closest_uses_query_reference(self, row_catalog: Catalog) -> None:
        kept = StarFilter.closest(2).apply(list(row_catalog), reference=to_direction(44.0, 0.0))
        assert [s.source_id for s in kept] == [8, 9]

    def test_keep_closest_zero_and_one(self, row_catalog: Catalog) -> None:
        assert KeepClosest(0).select(list(row_catalog), reference=(1.0, 0.0, 0.0)) == []
        kept = KeepClosest(1).select(list(row_catalog)[:2], reference=to_direction(2.5, 0.0))
        assert len(kept) == 1

    def test_keep_closest_needs_reference(self, row_catalog: Catalog) -> None:
        with pytest.raises(InvalidArgumentError):
            KeepClosest(1).select(list(row_catalog))
        with pytest.raises(InvalidArgumentError):
            KeepClosest(-1)

    def test_selection_runs_after_predicate(self, row_catalog: Catalog) -> None:
        f = StarFilter.brighter_than(4.0).with_selection(FilterSelect(skip=1, limit=2))
        assert [s.source_id for s in f.apply(list(row_catalog))] == [1, 2]

    def test_then_keeps_latest_selection(self) -> None:
        first = StarFilter.select(limit=1)
        second = StarFilter.select(limit=5)
        assert first.then(second).selection == FilterSelect(0, 5)
        assert first.then(StarFilter.all()).selection == FilterSelect(0, 1)
