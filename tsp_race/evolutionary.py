import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .solvers.base import rand_range
from .solvers.genome import CROSSOVER_RATE, MUTATION_RATE, Genotype, Tour


NUMBER = (int, float)


def check_type(name: str, value, kinds, optional: bool = False) -> None:
    """Raise ValueError unless ``value`` is an instance of ``kinds`` (bools never count)."""
    if value is None and optional:
        return
    if isinstance(value, bool) or not isinstance(value, kinds):
        expected = " or ".join(k.__name__ for k in (kinds if isinstance(kinds, tuple) else (kinds,)))
        raise ValueError(f"{name} must be {expected}, got {value!r}.")


@dataclass
class EvolutionConfig:
    population_size: int = 100
    offspring: int = 10
    mutation_rate: float = MUTATION_RATE
    crossover_rate: float = CROSSOVER_RATE
    random_seed: Optional[int] = None

    def __post_init__(self):
        check_type("population_size", self.population_size, int)
        check_type("offspring", self.offspring, int)
        check_type("mutation_rate", self.mutation_rate, NUMBER)
        check_type("crossover_rate", self.crossover_rate, NUMBER)
        check_type("random_seed", self.random_seed, int, optional=True)
        if self.population_size < 1:
            raise ValueError("population_size must be at least 1.")
        if self.offspring < 0:
            raise ValueError("offspring must not be negative.")
        for name in ("mutation_rate", "crossover_rate"):
            rate = getattr(self, name)
            if not 0.0 <= rate <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {rate}.")


class Population:
    """Fixed-size set of tours evolved in place, one slot at a time.

    A population belongs to exactly one worker; nothing here is thread-safe.
    """

    def __init__(
        self,
        solutions: List[Tour],
        rng: Optional[random.Random] = None,
        cfg: Optional[EvolutionConfig] = None,
    ):
        if not solutions:
            raise ValueError("A population needs at least one tour.")
        self.cfg = cfg or EvolutionConfig(population_size=len(solutions))
        self.rng = rng or random.Random(self.cfg.random_seed)
        self.solutions = solutions

    @classmethod
    def from_genotype(
        cls,
        genotype: Genotype,
        cfg: EvolutionConfig,
        rng: Optional[random.Random] = None,
    ) -> "Population":
        rng = rng or random.Random(cfg.random_seed)
        solutions = [genotype.random_tour(rng) for _ in range(cfg.population_size)]
        return cls(solutions, rng=rng, cfg=cfg)

    def __len__(self) -> int:
        return len(self.solutions)

    def scores(self) -> List[float]:
        return [tour.score() for tour in self.solutions]

    def best(self) -> Tour:
        """Copy of the lowest-scoring tour; the first one found wins ties."""
        best = None
        best_score = float("inf")
        for current in self.solutions:
            current_score = current.score()
            if best is None or current_score < best_score:
                best = current
                best_score = current_score
        return best.copy()

    def select(self) -> Tuple[Tour, Tour]:
        r0, r1 = rand_range(self.rng, len(self.solutions))
        return self.solutions[r0], self.solutions[r1]

    def evolve(self, offspring: Optional[int] = None) -> int:
        """Run one generation and return how many slots were replaced.

        Each child challenges one random slot and takes it only if it scores
        no worse than the occupant. Populations of one tour have no pairs to
        breed and are left unchanged.
        """
        if offspring is None:
            offspring = self.cfg.offspring
        if len(self.solutions) < 2:
            return 0
        replaced = 0
        for _ in range(offspring // 2):
            p0, p1 = self.select()
            children = p0.crossover(
                p1,
                self.rng,
                crossover_rate=self.cfg.crossover_rate,
                mutation_rate=self.cfg.mutation_rate,
            )
            for child in children:
                i = self.rng.randrange(len(self.solutions))
                if child.score() <= self.solutions[i].score():
                    self.solutions[i] = child
                    replaced += 1
        return replaced
