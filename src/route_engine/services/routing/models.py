"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, List, Optional

import numpy as np


def _frozen_square(values, kind: str) -> np.ndarray:
    array = np.array(values, dtype=float)
    if array.size == 0:
        array = array.reshape(0, 0)
    if array.ndim != 2 or array.shape[0] != array.shape[1]:
        raise ValueError(f"{kind} must be square, got shape {array.shape}.")
    array.setflags(write=False)
    return array


@dataclass(frozen=True, slots=True)
class DistanceMatrix:
    """Raw great-circle distances in km. Used for reporting, never for solving."""

    values: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _frozen_square(self.values, "DistanceMatrix"))

    @property
    def size(self) -> int:
        return int(self.values.shape[0])

    def leg(self, i: int, j: int) -> float:
        return float(self.values[i, j])


@dataclass(frozen=True, slots=True)
class CostMatrix:
    """Synthetic cost surface the solver minimises, tagged with its algorithm label."""

    values: np.ndarray
    label: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _frozen_square(self.values, "CostMatrix"))

    @property
    def size(self) -> int:
        return int(self.values.shape[0])


@dataclass(slots=True)
class TourResult:
    order: List[int]
    total_distance_km: float
    total_cost: float = 0.0
    iterations: int = 0
    improvements: int = 0
    converged: bool = True
    stop_reason: Optional[str] = None


@dataclass(slots=True)
class InsightRow:
    point_id: Hashable
    label: Optional[str]
    distance_km: float


@dataclass(slots=True)
class RouteInsights:
    mode: str
    count: int
    total_distance_km: float
    avg_distance_km: float
    min_distance_km: float
    max_distance_km: float
    estimated_duration_hours: float
    rows: List[InsightRow] = field(default_factory=list)


@dataclass(slots=True)
class OptimizationResult:
    status: str
    point_ids: List[Hashable]
    tour: TourResult
    algorithm_label: str
    insights: Optional[RouteInsights] = None
    excluded: List[Hashable] = field(default_factory=list)

    @property
    def optimized(self) -> bool:
        return self.status == "optimized"
