import math
import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from ..data import City


# Radians per degree.
PI_RADS = math.pi / 180.0

# Radius of Earth in miles.
RADIUS_EARTH = 3959.0


def distance(c0: City, c1: City) -> float:
    """Great-circle distance in miles (spherical law of cosines)."""
    if c0.lat == c1.lat and c0.lon == c1.lon:
        return 0.0
    p0 = c0.lat * PI_RADS
    p1 = c1.lat * PI_RADS
    p2 = abs(c1.lon - c0.lon) * PI_RADS
    cos_angle = math.sin(p0) * math.sin(p1) + math.cos(p0) * math.cos(p1) * math.cos(p2)
    return float(RADIUS_EARTH * np.arccos(np.clip(cos_angle, -1.0, 1.0)))


def rand_range(rng: random.Random, n: int) -> Tuple[int, int]:
    """Two distinct random indices in [0, n), ordered low to high."""
    if n < 2:
        raise ValueError(f"Need at least 2 items to pick distinct indices, got {n}.")
    r0, r1 = rng.randrange(n), rng.randrange(n)
    while r0 == r1:
        r1 = rng.randrange(n)
    if r1 < r0:
        return r1, r0
    return r0, r1


def tour_length(graph: nx.Graph, tour: Sequence[str]) -> float:
    dist = 0.0
    n = len(tour)
    for i in range(n):
        a = tour[i]
        b = tour[(i + 1) % n]
        if a == b:
            continue
        dist += graph[a][b]["weight"]
    return float(dist)


@dataclass
class SolveResult:
    tour: Sequence[str]
    length: float
    solver_name: str
    optimum: Optional[float] = None

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0):
            return float("inf")
        return (self.length - self.optimum) / self.optimum
