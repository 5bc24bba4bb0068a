"""
Visiting order for the markers of a tour.

Greedy nearest neighbour over a distance matrix: an open path (no return to
the start), O(n^2), deterministic. It approximates a short route; it is not
an optimal TSP solution.
"""
from typing import List, Optional, Sequence

from models.Marker import Marker
from exceptions import InvalidArgument
from services.mapbox_matrix_service import DistanceMatrix, is_square_matrix


def nearest_neighbor_order(distances: Sequence[Sequence[Optional[float]]]) -> List[int]:
    """Indices in visiting order, always starting from index 0.

    A None cell is never chosen while a finite one remains. When every
    remaining cell from the current point is None, the first unvisited
    index (list order) is taken so all indices are covered.
    """
    n = len(distances)
    if n == 0:
        return []

    visited = [False] * n
    order = [0]  # Empezar desde el primer punto
    visited[0] = True
    current = 0

    while len(order) < n:
        nearest = None
        min_dist = float("inf")

        for j in range(n):
            if visited[j]:
                continue
            dist = distances[current][j]
            if dist is None:
                continue
            if dist < min_dist:
                min_dist = dist
                nearest = j

        if nearest is None:
            nearest = visited.index(False)

        order.append(nearest)
        visited[nearest] = True
        current = nearest

    return order


class TourSortingService:

    def sorted_indices(self, markers: Sequence[Marker], matrix: DistanceMatrix) -> List[int]:
        """Permutation of range(len(markers)); raises InvalidArgument if the matrix is not that size."""
        if len(markers) > 1 and not is_square_matrix(matrix.distances, len(markers)):
            raise InvalidArgument(
                f"Distance matrix does not match the {len(markers)} markers to sort"
            )
        # any order of two stops walks the same single leg
        if len(markers) <= 2:
            return list(range(len(markers)))
        return nearest_neighbor_order(matrix.distances)

    def sort_markers_optimally(self, markers: Sequence[Marker], matrix: DistanceMatrix) -> List[str]:
        """Marker ids ordered to keep total walking distance short."""
        return [markers[i].id for i in self.sorted_indices(markers, matrix)]

    def calculate_total_distance(self, order: Sequence[int], distances: Sequence[Sequence[Optional[float]]]) -> float:
        """Sum of consecutive legs in meters; missing (None) legs count as 0."""
        total = 0.0
        for i in range(len(order) - 1):
            distance = distances[order[i]][order[i + 1]]
            if distance is not None:
                total += distance
        return total
