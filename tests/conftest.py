from __future__ import annotations

import numpy as np
import pytest

from star_catalog.catalog import Catalog, CatalogBuilder
from star_catalog.geometry import to_ra_de
from star_catalog.names import NameMap

# (source_id, ra, de, distance_ly, vmag, b_v)
BRIGHT_STARS = [
    (11767, 37.95, 89.26, 431.0, 1.97, 0.64),  # Polaris
    (54061, 165.93, 61.75, 124.0, 1.81, 1.06),  # Dubhe
    (32349, 101.29, -16.72, 8.6, -1.44, 0.01),  # Sirius
    (91262, 279.23, 38.78, 25.0, 0.03, 0.0),  # Vega
    (53910, 165.46, 56.38, 79.0, 2.34, 0.03),  # Merak
]


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def random_catalog(rng: np.random.Generator) -> Catalog:
    """2000 stars spread uniformly over the sphere, coarse grid."""
    vectors = rng.normal(size=(2000, 3))
    magnitudes = rng.uniform(-1.0, 8.0, size=2000)
    builder = CatalogBuilder()
    for i, (v, mag) in enumerate(zip(vectors, magnitudes, strict=True)):
        ra, de = to_ra_de(v)
        builder.add_star(ra, de, distance=10.0 + i, magnitude=float(mag), source_id=100_000 + i)
    return builder.build(resolution=8)


@pytest.fixture
def bright_catalog() -> Catalog:
    return Catalog.from_rows(BRIGHT_STARS)


@pytest.fixture
def bright_names(bright_catalog: Catalog) -> NameMap:
    return NameMap.from_aliases(
        bright_catalog,
        [(11767, "Polaris"), (11767, "North Star"), (54061, "Dubhe"), (32349, "Sirius")],
    )
