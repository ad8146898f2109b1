from .base import SolveResult, distance, rand_range, tour_length
from .genome import Genotype, Tour
from .heuristics import baseline, complete_graph, nearest_neighbor_tour, two_opt

__all__ = [
    "SolveResult",
    "distance",
    "rand_range",
    "tour_length",
    "Genotype",
    "Tour",
    "baseline",
    "complete_graph",
    "nearest_neighbor_tour",
    "two_opt",
]
