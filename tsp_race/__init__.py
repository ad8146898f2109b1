"""
Genetic TSP solver: independent populations race in parallel and report their best tours.
"""

__all__ = [
    "data",
    "evolutionary",
    "island",
]
