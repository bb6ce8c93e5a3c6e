"""Star names: display name to catalog index.

A NameMap is built against one catalog, from ``(source_id, name)``
aliases such as the built-in HIP_ALIASES table of Hipparcos numbers.
Several names may refer to the same star.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from star_catalog.errors import StarNotFoundError
from star_catalog.star import CatalogIndex

if TYPE_CHECKING:
    from star_catalog.catalog import Catalog

logger = logging.getLogger(__name__)


class NameMap(Mapping[str, CatalogIndex]):
    """Immutable mapping from star name to CatalogIndex."""

    def __init__(self, names: Mapping[str, CatalogIndex] | None = None) -> None:
        self._names: Mapping[str, CatalogIndex] = MappingProxyType(dict(names or {}))

    @classmethod
    def from_aliases(
        cls,
        catalog: Catalog,
        aliases: Iterable[tuple[int, str]],
        ignore_not_found: bool = True,
    ) -> NameMap:
        """Resolve ``(source_id, name)`` pairs against ``catalog``.

        Args:
            catalog: Catalog whose source ids the aliases refer to.
            aliases: Pairs of source catalogue id and display name.
            ignore_not_found: Skip aliases for stars missing from the
                catalog (e.g. removed by a magnitude cut) instead of raising.

        Raises:
            StarNotFoundError: If an alias does not resolve and
                ``ignore_not_found`` is False.
        """
        names: dict[str, CatalogIndex] = {}
        skipped = 0
        for source_id, name in aliases:
            try:
                names[str(name)] = catalog.find_source_id(int(source_id))
            except StarNotFoundError:
                if not ignore_not_found:
                    raise
                skipped += 1
        if skipped:
            logger.debug("Skipped %d aliases with no matching star", skipped)
        return cls(names)

    def __getitem__(self, name: str) -> CatalogIndex:
        return self._names[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def names_of(self, index: CatalogIndex) -> list[str]:
        """All names referring to ``index``, sorted."""
        return sorted(name for name, i in self._names.items() if i == index)

    def to_aliases(self, catalog: Catalog) -> list[tuple[int, str]]:
        """Back to ``(source_id, name)`` pairs, for serialization.

        Names of stars without a source id cannot be written as aliases and
        are left out.
        """
        pairs: list[tuple[int, str]] = []
        for name, index in sorted(self._names.items()):
            star = catalog.lookup(index)
            if star.source_id is None:
                logger.debug("Not writing name %r: star %d has no source id", name, index.value)
                continue
            pairs.append((star.source_id, name))
        return pairs


#: Hipparcos numbers of some commonly named stars.
HIP_ALIASES: tuple[tuple[int, str], ...] = (
    (677, "Alpheratz"),
    (746, "Caph"),
    (1067, "Algenib"),
    (2081, "Ankaa"),
    (3179, "Shedir"),
    (3419, "Diphda"),
    (5447, "Mirach"),
    (7588, "Achernar"),
    (9640, "Almaak"),
    (9884, "Hamal"),
    (10826, "Mira"),
    (11767, "Polaris"),
    (13847, "Acamar"),
    (14135, "Menkar"),
    (14576, "Algol"),
    (15863, "Mirphak"),
    (17702, "Alcyone"),
    (17851, "Pleione"),
    (18543, "Zaurak"),
    (21421, "Aldebaran"),
    (24436, "Rigel"),
    (24608, "Capella"),
    (25336, "Bellatrix"),
    (25428, "Alnath"),
    (25606, "Nihal"),
    (25930, "Mintaka"),
    (25985, "Arneb"),
    (26311, "Alnilam"),
    (26727, "Alnitak"),
    (27366, "Saiph"),
    (27989, "Betelgeuse"),
    (30438, "Canopus"),
    (31681, "Alhena"),
    (32349, "Sirius"),
    (33579, "Adhara"),
    (36850, "Castor"),
    (37279, "Procyon"),
    (37826, "Pollux"),
    (46390, "Alphard"),
    (49669, "Regulus"),
    (50583, "Algieba"),
    (53910, "Merak"),
    (54061, "Dubhe"),
    (57632, "Denebola"),
    (58001, "Phad"),
    (59774, "Megrez"),
    (60718, "Acrux"),
    (62956, "Alioth"),
    (63125, "Cor Caroli"),
    (63608, "Vindemiatrix"),
    (65378, "Mizar"),
    (65474, "Spica"),
    (65477, "Alcor"),
    (67301, "Alkaid"),
    (68702, "Hadar"),
    (68756, "Thuban"),
    (69673, "Arcturus"),
    (70890, "Proxima"),
    (71683, "Rigil Kent"),
    (72105, "Izar"),
    (72607, "Kocab"),
    (76267, "Alphekka"),
    (77070, "Unukalhai"),
    (80763, "Antares"),
    (84345, "Rasalgethi"),
    (85927, "Shaula"),
    (86032, "Rasalhague"),
    (87833, "Etamin"),
    (87937, "Barnard's star"),
    (90185, "Kaus Australis"),
    (91262, "Vega"),
    (92420, "Sheliak"),
    (92855, "Nunki"),
    (95947, "Albireo"),
    (97278, "Tarazed"),
    (97649, "Altair"),
    (98036, "Alshain"),
    (102098, "Deneb"),
    (105199, "Alderamin"),
    (107315, "Enif"),
    (109074, "Sadalmelik"),
    (109268, "Alnair"),
    (113368, "Fomalhaut"),
    (113881, "Scheat"),
    (113963, "Markab"),
)


__all__ = ["HIP_ALIASES", "NameMap"]
