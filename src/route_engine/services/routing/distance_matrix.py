"""All-pairs great-circle distance matrix."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ...models.domain import GeoPoint
from ..geospatial import haversine_pairwise_km
from .models import DistanceMatrix


def build_distance_matrix(points: Sequence[GeoPoint]) -> DistanceMatrix:
    """Return the n x n Haversine matrix (km) for the points, in input order.

    Only the upper triangle is computed; the lower triangle is its mirror so
    the result is exactly symmetric with a zero diagonal.
    """
    n = len(points)
    if n < 2:
        return DistanceMatrix(np.zeros((n, n)))

    lats = np.array([point.lat for point in points], dtype=float)
    lngs = np.array([point.lng for point in points], dtype=float)
    upper = np.triu(haversine_pairwise_km(lats, lngs), k=1)
    return DistanceMatrix(upper + upper.T)


def path_distance_km(matrix: DistanceMatrix, order: Sequence[int], *, round_trip: bool = False) -> float:
    """Sum consecutive legs of `order` using raw distances."""

    if len(order) < 2:
        return 0.0
    total = sum(matrix.leg(a, b) for a, b in zip(order, order[1:]))
    if round_trip:
        total += matrix.leg(order[-1], order[0])
    return float(total)
