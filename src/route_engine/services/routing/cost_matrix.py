"""Compose the cost surface the solver minimises from the raw distance matrix."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

import numpy as np

from ...config import Settings, settings as default_settings
from ...models.domain import GeoPoint, OptimizationConfig
from .clustering import kmeans_assignments
from .models import CostMatrix, DistanceMatrix

logger = logging.getLogger(__name__)

DEFAULT_LABEL = "Shortest Distance"

CRITERION_LABELS = {
    "shortest_distance": "Shortest Distance",
    "fuel_efficiency": "Fuel Efficient",
    "time_optimized": "Time Optimized",
    "cluster_priority": "Cluster Priority",
}


def shortest_distance_costs(raw: np.ndarray) -> np.ndarray:
    return raw.copy()


def fuel_efficiency_costs(raw: np.ndarray) -> np.ndarray:
    """Squared distances, so one long leg costs more than several short ones."""
    return raw ** 2


def time_costs(raw: np.ndarray, *, avg_speed_kmh: float, service_time_hours: float) -> np.ndarray:
    """Travel hours plus the service stop, zero on the diagonal."""
    hours = raw / avg_speed_kmh + service_time_hours
    np.fill_diagonal(hours, 0.0)
    return hours


def cluster_costs(raw: np.ndarray, assignments: Sequence[int], *, penalty: float) -> np.ndarray:
    labels = np.asarray(assignments)
    if labels.shape[0] != raw.shape[0]:
        raise ValueError(
            f"Cluster assignment size mismatch: assignments={labels.shape[0]}, matrix={raw.shape[0]}"
        )
    crossing = labels[:, None] != labels[None, :]
    return np.where(crossing, raw * penalty, raw)


def normalize(matrix: np.ndarray) -> np.ndarray:
    """Scale by the largest entry; an all-zero matrix is returned unchanged."""
    peak = float(matrix.max()) if matrix.size else 0.0
    if peak == 0:
        return matrix
    return matrix / peak


def compose_cost_matrix(
    distances: DistanceMatrix,
    config: Optional[OptimizationConfig] = None,
    *,
    points: Optional[Sequence[GeoPoint]] = None,
    settings: Optional[Settings] = None,
) -> CostMatrix:
    """Build the solver's cost matrix for the active criteria.

    One criterion yields its own matrix untouched. Several are normalised
    by their own maximum and averaged. None falls back to raw distances.
    `points` is only needed when cluster priority is active.
    """
    cfg = settings or default_settings
    config = config or OptimizationConfig()
    raw = distances.values

    builders: dict[str, Callable[[], np.ndarray]] = {
        "shortest_distance": lambda: shortest_distance_costs(raw),
        "fuel_efficiency": lambda: fuel_efficiency_costs(raw),
        "time_optimized": lambda: time_costs(
            raw,
            avg_speed_kmh=cfg.avg_speed_kmh,
            service_time_hours=cfg.service_time_hours,
        ),
        "cluster_priority": lambda: _cluster_priority(raw, points, cfg),
    }

    active = config.active()
    if not active:
        logger.info("No optimisation criteria selected; using raw distances")
        return CostMatrix(raw, DEFAULT_LABEL)

    matrices = [builders[name]() for name in active]
    labels = [CRITERION_LABELS[name] for name in active]

    if len(matrices) == 1:
        return CostMatrix(matrices[0], labels[0])

    combined = np.mean([normalize(matrix) for matrix in matrices], axis=0)
    label = " + ".join(labels)
    logger.debug("Combined %d criteria into '%s'", len(matrices), label)
    return CostMatrix(combined, label)


def _cluster_priority(raw: np.ndarray, points: Optional[Sequence[GeoPoint]], cfg: Settings) -> np.ndarray:
    if points is None:
        raise ValueError("Cluster priority requires the points the distance matrix was built from.")
    if len(points) != raw.shape[0]:
        raise ValueError(f"Point count mismatch: points={len(points)}, matrix={raw.shape[0]}")
    assignments = kmeans_assignments(points, settings=cfg)
    return cluster_costs(raw, assignments, penalty=cfg.cross_cluster_penalty)
