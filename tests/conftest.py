import random
from pathlib import Path

import pytest

from tsp_race.data import City
from tsp_race.solvers.genome import Genotype


CITY_LINES = """\
Montgomery 32.377 -86.300
Phoenix 33.448 -112.097
Sacramento 38.577 -121.494
Denver 39.739 -104.985
Hartford 41.764 -72.682
Tallahassee 30.438 -84.281
Atlanta 33.749 -84.388
Boise 43.618 -116.200
Springfield 39.798 -89.654
Austin 30.275 -97.740
Helena 46.586 -112.018
Boston 42.358 -71.064
"""


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def square():
    """Four cities on a one-degree square, listed in perimeter order."""
    return [
        City("a", 0.0, 0.0),
        City("b", 0.0, 1.0),
        City("c", 1.0, 1.0),
        City("d", 1.0, 0.0),
    ]


@pytest.fixture
def cities_file(tmp_path) -> Path:
    path = tmp_path / "cities.tsp"
    path.write_text(CITY_LINES)
    return path


@pytest.fixture
def genotype(cities_file) -> Genotype:
    return Genotype.load(cities_file)
