import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from ..data import City, load_cities
from .base import distance, rand_range


MUTATION_RATE = 0.1
CROSSOVER_RATE = 0.9


@dataclass
class Tour:
    """A closed path through every city: one candidate solution."""

    path: List[City] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.path)

    def __str__(self) -> str:
        return ", ".join(self.names)

    @property
    def names(self) -> List[str]:
        return [city.name for city in self.path]

    def copy(self) -> "Tour":
        return Tour(path=self.path[:])

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self.path)

    def contains(self, city: City) -> bool:
        for c in self.path:
            if c.name == city.name:
                return True
        return False

    def is_permutation_of(self, cities: Iterable[City]) -> bool:
        expected = sorted(c.name for c in cities)
        return sorted(self.names) == expected

    def mutate(self, rng: random.Random, rate: float = MUTATION_RATE) -> None:
        """Reverse a random sub-path in place with probability ``rate``."""
        if len(self.path) < 2 or rng.random() >= rate:
            return
        lo, hi = rand_range(rng, len(self.path))
        self.path[lo : hi + 1] = reversed(self.path[lo : hi + 1])

    def crossover(
        self,
        other: "Tour",
        rng: random.Random,
        crossover_rate: float = CROSSOVER_RATE,
        mutation_rate: float = MUTATION_RATE,
    ) -> List["Tour"]:
        """Zero or two children, each a prefix of one parent completed in the other's order."""
        if rng.random() >= crossover_rate:
            return []
        return [
            _make_child(self.path, other.path, rng, mutation_rate),
            _make_child(other.path, self.path, rng, mutation_rate),
        ]

    def score(self) -> float:
        """Total length of the closed loop, last city back to the first."""
        if not self.path:
            return 0.0
        n = len(self.path) - 1
        score = distance(self.path[n], self.path[0])
        for i in range(n):
            score += distance(self.path[i], self.path[i + 1])
        return score


def _make_child(
    head: List[City], tail: List[City], rng: random.Random, mutation_rate: float
) -> Tour:
    n = rng.randrange(len(head))
    child = Tour(path=head[:n])
    for city in tail:
        if not child.contains(city):
            child.path.append(city)
    child.mutate(rng, mutation_rate)
    return child


class Genotype:
    """The fixed set of cities every tour is a permutation of."""

    def __init__(self, genes: Iterable[City]):
        self._genes: Tuple[City, ...] = tuple(genes)

    @classmethod
    def load(cls, path: Union[str, Path], fmt: str = "auto") -> "Genotype":
        return cls(load_cities(path, fmt=fmt))

    @property
    def genes(self) -> Tuple[City, ...]:
        return self._genes

    def __len__(self) -> int:
        return len(self._genes)

    def random_tour(self, rng: random.Random) -> Tour:
        tour = Tour(path=list(self._genes))
        tour.shuffle(rng)
        return tour
