from itertools import combinations
from typing import List, Sequence

import networkx as nx

from ..data import City
from .base import SolveResult, distance, tour_length


def complete_graph(cities: Sequence[City]) -> nx.Graph:
    graph = nx.Graph()
    for city in cities:
        graph.add_node(city.name, city=city)
    for a, b in combinations(cities, 2):
        graph.add_edge(a.name, b.name, weight=distance(a, b))
    return graph


def nearest_neighbor_tour(graph: nx.Graph, start: str) -> List[str]:
    tour = [start]
    unvisited = set(graph.nodes())
    unvisited.remove(start)
    current = start
    while unvisited:
        nxt = min(unvisited, key=lambda node: (graph[current][node]["weight"], node))
        tour.append(nxt)
        unvisited.remove(nxt)
        current = nxt
    return tour


def two_opt(graph: nx.Graph, tour: List[str], max_iter: int = 200) -> List[str]:
    best = tour
    best_len = tour_length(graph, best)
    n = len(tour)
    it = 0
    improved = True
    while improved and it < max_iter:
        improved = False
        it += 1
        for i in range(1, n - 1):
            for j in range(i + 2, n + 1):
                new_tour = best[:]
                new_tour[i:j] = reversed(new_tour[i:j])
                new_len = tour_length(graph, new_tour)
                if new_len + 1e-9 < best_len:
                    best = new_tour
                    best_len = new_len
                    improved = True
    return best


def baseline(cities: Sequence[City], max_iter: int = 200) -> SolveResult:
    """Nearest neighbour from the first city, polished with 2-opt."""
    graph = complete_graph(cities)
    tour = nearest_neighbor_tour(graph, cities[0].name)
    tour = two_opt(graph, tour, max_iter=max_iter)
    return SolveResult(
        tour=tour,
        length=tour_length(graph, tour),
        solver_name="nearest_neighbor+two_opt",
    )
