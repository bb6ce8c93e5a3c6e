from __future__ import annotations

import math

import pytest

from star_catalog.errors import InvalidArgumentError, InvalidGeometryError
from star_catalog.star import UNKNOWN_DISTANCE, CatalogIndex, Star


def _star(**overrides: object) -> Star:
    fields: dict[str, object] = {
        "id": CatalogIndex(0),
        "ra": 37.95,
        "de": 89.26,
        "distance": 431.0,
        "magnitude": 1.97,
        "color_index": 0.64,
        "source_id": 11767,
    }
    fields.update(overrides)
    return Star(**fields)  # type: ignore[arg-type]


class TestCatalogIndex:
    def test_raw_round_trip(self) -> None:
        assert CatalogIndex.from_raw(7).to_raw() == 7
        assert int(CatalogIndex(3)) == 3

    def test_usable_as_sequence_index(self) -> None:
        assert ["a", "b", "c"][CatalogIndex(2)] == "c"

    def test_ordering_and_hashing(self) -> None:
        assert CatalogIndex(1) < CatalogIndex(2)
        assert sorted([CatalogIndex(5), CatalogIndex(0)]) == [CatalogIndex(0), CatalogIndex(5)]
        assert {CatalogIndex(1), CatalogIndex(1)} == {CatalogIndex(1)}

    def test_repr(self) -> None:
        assert repr(CatalogIndex(12)) == "CatalogIndex(12)"

    @pytest.mark.parametrize("value", [-1, True, 1.0, "3", None])
    def test_rejects_invalid_values(self, value: object) -> None:
        with pytest.raises(InvalidArgumentError):
            CatalogIndex(value)  # type: ignore[arg-type]


class TestStar:
    def test_direction_is_derived(self) -> None:
        star = _star(ra=90.0, de=0.0)
        assert star.direction == pytest.approx((0.0, 1.0, 0.0), abs=1e-15)

    def test_equality_ignores_cached_direction(self) -> None:
        assert _star() == _star()
        assert _star() != _star(magnitude=2.0)

    def test_unknown_distance_allowed(self) -> None:
        assert _star(distance=UNKNOWN_DISTANCE).distance == 0.0

    @pytest.mark.parametrize("distance", [-1.0, math.nan, math.inf])
    def test_rejects_bad_distance(self, distance: float) -> None:
        with pytest.raises(InvalidArgumentError):
            _star(distance=distance)

    def test_rejects_non_finite_magnitude(self) -> None:
        with pytest.raises(InvalidArgumentError):
            _star(magnitude=math.nan)

    def test_rejects_non_finite_position(self) -> None:
        with pytest.raises(InvalidGeometryError):
            _star(ra=math.nan)

    def test_brighter_than_is_inclusive(self) -> None:
        star = _star(magnitude=2.0)
        assert star.brighter_than(2.0)
        assert star.brighter_than(3.0)
        assert not star.brighter_than(1.9)

    def test_angles(self) -> None:
        a = _star(ra=0.0, de=0.0)
        b = _star(id=CatalogIndex(1), ra=0.0, de=30.0)
        assert a.angle_to(b) == pytest.approx(30.0)
        assert a.cos_angle_between(b) == pytest.approx(math.cos(math.radians(30.0)))
        assert a.angle_to_direction((0.0, 0.0, 1.0)) == pytest.approx(90.0)

    def test_to_row(self) -> None:
        assert _star().to_row() == (11767, 37.95, 89.26, 431.0, 1.97, 0.64)
        assert _star(source_id=None).to_row()[0] is None
