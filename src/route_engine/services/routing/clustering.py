"""Deterministic k-means partition of stops."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from ...config import Settings, settings as default_settings
from ...models.domain import GeoPoint

logger = logging.getLogger(__name__)


def cluster_count(n: int, settings: Optional[Settings] = None) -> int:
    cfg = settings or default_settings
    return max(cfg.min_clusters, math.ceil(n / cfg.cluster_size))


def kmeans_assignments(
    points: Sequence[GeoPoint],
    k: Optional[int] = None,
    *,
    max_iterations: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> List[int]:
    """Assign each point to one of `k` clusters.

    Centroids start at the points found at evenly spaced indices, so the
    result depends only on the input. Distances are squared planar lat/lng;
    the assignment only feeds a penalty, never a reported distance. A
    centroid that loses all its members stays where it was.
    """
    cfg = settings or default_settings
    n = len(points)
    if k is None:
        k = cluster_count(n, cfg)
    if k < 1:
        raise ValueError("k must be >= 1")
    if n <= k:
        return list(range(n))

    max_iterations = max_iterations if max_iterations is not None else cfg.kmeans_max_iterations
    coordinates = np.array([(point.lat, point.lng) for point in points], dtype=float)
    seeds = [(i * n) // k for i in range(k)]
    centroids = coordinates[seeds].copy()

    assignments = np.zeros(n, dtype=int)
    for iteration in range(max_iterations):
        deltas = coordinates[:, None, :] - centroids[None, :, :]
        squared = (deltas ** 2).sum(axis=2)
        # argmin returns the first minimum, so ties go to the lowest centroid index.
        new_assignments = squared.argmin(axis=1)

        changed = bool((new_assignments != assignments).any())
        assignments = new_assignments
        if not changed:
            logger.debug("k-means converged after %d iteration(s) (k=%d, n=%d)", iteration + 1, k, n)
            break

        centroids = update_centroids(coordinates, assignments, centroids)
    else:
        logger.debug("k-means stopped at iteration cap %d (k=%d, n=%d)", max_iterations, k, n)

    return [int(label) for label in assignments]


def update_centroids(coordinates: np.ndarray, assignments: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Move each centroid to the mean of its members; empty clusters keep their centroid."""

    updated = centroids.copy()
    for cluster in range(len(centroids)):
        members = coordinates[assignments == cluster]
        if len(members):
            updated[cluster] = members.mean(axis=0)
    return updated
