"""Composable star predicates and result-selection policies.

A StarFilter is a stateless predicate over a Star, optionally paired with
a selection policy. Predicates are evaluated per candidate after the
spatial partition has narrowed the search; selection policies run only
once every match for a query is known, so the result never depends on
the order candidates were visited in.

Usage:
    >>> bright = StarFilter.brighter_than(5.0)
    >>> nearby_bright = bright.then(StarFilter.within((1.0, 0.0, 0.0), 10.0))
    >>> top3 = nearby_bright.with_selection(KeepClosest(3))
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from star_catalog.errors import InvalidArgumentError
from star_catalog.geometry import Vec3, angular_separation, normalize
from star_catalog.star import Star

StarPredicate = Callable[[Star], bool]

# Slack (degrees) for inclusive angular comparisons.
ANGLE_EPSILON = 1e-9


@dataclass(frozen=True)
class FilterSelect:
    """Skip the first ``skip`` matches, then keep at most ``limit``."""

    skip: int = 0
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.skip < 0:
            raise InvalidArgumentError(f"skip must be >= 0, got {self.skip}", skip=self.skip)
        if self.limit is not None and self.limit < 0:
            raise InvalidArgumentError(f"limit must be >= 0, got {self.limit}", limit=self.limit)

    def select(self, stars: list[Star], reference: Sequence[float] | None = None) -> list[Star]:
        end = None if self.limit is None else self.skip + self.limit
        return stars[self.skip : end]


@dataclass(frozen=True)
class KeepClosest:
    """Keep the ``k`` stars closest to ``reference`` (default: the query direction).

    Ties are broken by catalog index. The returned stars keep their
    incoming order.
    """

    k: int
    reference: Vec3 | None = None

    def __post_init__(self) -> None:
        if self.k < 0:
            raise InvalidArgumentError(f"k must be >= 0, got {self.k}", k=self.k)
        if self.reference is not None:
            object.__setattr__(self, "reference", normalize(self.reference))

    def select(self, stars: list[Star], reference: Sequence[float] | None = None) -> list[Star]:
        ref = self.reference if self.reference is not None else reference
        if ref is None:
            raise InvalidArgumentError("KeepClosest needs a reference direction")
        ranked = sorted(stars, key=lambda s: (angular_separation(s.direction, ref), s.id))
        keep = {s.id for s in ranked[: self.k]}
        return [s for s in stars if s.id in keep]


SelectionPolicy = FilterSelect | KeepClosest


def _accept_all(star: Star) -> bool:
    return True


@dataclass(frozen=True)
class StarFilter:
    """A star predicate plus an optional selection policy."""

    predicate: StarPredicate = _accept_all
    selection: SelectionPolicy | None = None

    @classmethod
    def all(cls) -> StarFilter:
        return cls()

    @classmethod
    def brighter_than(cls, magnitude: float) -> StarFilter:
        """Accept stars whose magnitude is at most ``magnitude``."""
        if not math.isfinite(magnitude):
            raise InvalidArgumentError(f"magnitude must be finite, got {magnitude}")
        return cls(lambda s: s.magnitude <= magnitude)

    @classmethod
    def within(cls, direction: Sequence[float], angle: float) -> StarFilter:
        """Accept stars at most ``angle`` degrees from ``direction``."""
        if not math.isfinite(angle) or angle < 0:
            raise InvalidArgumentError(f"angle must be finite and >= 0, got {angle}")
        d = normalize(direction)
        return cls(lambda s: angular_separation(s.direction, d) <= angle + ANGLE_EPSILON)

    @classmethod
    def select(cls, skip: int = 0, limit: int | None = None) -> StarFilter:
        return cls(selection=FilterSelect(skip, limit))

    @classmethod
    def closest(cls, k: int, reference: Sequence[float] | None = None) -> StarFilter:
        ref = None if reference is None else normalize(reference)
        return cls(selection=KeepClosest(k, ref))

    def then(self, other: StarFilter) -> StarFilter:
        """Both predicates must accept; ``other``'s selection wins if it has one."""
        first = self.predicate
        second = other.predicate
        return StarFilter(
            lambda s: first(s) and second(s),
            other.selection if other.selection is not None else self.selection,
        )

    __and__ = then

    def with_selection(self, selection: SelectionPolicy | None) -> StarFilter:
        return replace(self, selection=selection)

    def matches(self, star: Star) -> bool:
        return bool(self.predicate(star))

    def apply(self, stars: list[Star], reference: Sequence[float] | None = None) -> list[Star]:
        """Filter ``stars`` (already in result order) and apply the selection policy."""
        matched = [s for s in stars if self.predicate(s)]
        if self.selection is None:
            return matched
        return self.selection.select(matched, reference)


__all__ = [
    "ANGLE_EPSILON",
    "FilterSelect",
    "KeepClosest",
    "SelectionPolicy",
    "StarFilter",
    "StarPredicate",
]
