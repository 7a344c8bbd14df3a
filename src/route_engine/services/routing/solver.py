"""Nearest-neighbour construction with 2-opt improvement."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence

import numpy as np

from ...config import Settings, settings as default_settings
from .distance_matrix import path_distance_km
from .models import CostMatrix, DistanceMatrix, TourResult

logger = logging.getLogger(__name__)

# Relative margin a move must beat; float noise alone never counts as a gain.
IMPROVEMENT_EPSILON = 1e-12

STOP_ITERATION_CAP = "iteration_cap"
STOP_TIME_BUDGET = "time_budget"
STOP_CANCELLED = "cancelled"


def tour_cost(costs: np.ndarray, order: Sequence[int], *, round_trip: bool = False) -> float:
    if len(order) < 2:
        return 0.0
    total = sum(float(costs[a, b]) for a, b in zip(order, order[1:]))
    if round_trip:
        total += float(costs[order[-1], order[0]])
    return total


def nearest_neighbor_order(costs: np.ndarray, start: int = 0) -> List[int]:
    """Greedy tour: always step to the cheapest unvisited index (lowest index on ties)."""

    n = costs.shape[0]
    if n == 0:
        return []
    order = [start]
    visited = np.zeros(n, dtype=bool)
    visited[start] = True
    current = start
    for _ in range(n - 1):
        candidates = np.where(visited, np.inf, costs[current])
        current = int(np.argmin(candidates))
        visited[current] = True
        order.append(current)
    return order


class _StopCondition:
    """Cooperative stop check shared by the 2-opt passes."""

    def __init__(
        self,
        time_budget_seconds: Optional[float],
        should_stop: Optional[Callable[[], bool]],
    ) -> None:
        self.deadline = time.monotonic() + time_budget_seconds if time_budget_seconds is not None else None
        self.should_stop = should_stop
        self.reason: Optional[str] = None

    def triggered(self) -> bool:
        if self.reason:
            return True
        if self.should_stop is not None and self.should_stop():
            self.reason = STOP_CANCELLED
        elif self.deadline is not None and time.monotonic() >= self.deadline:
            self.reason = STOP_TIME_BUDGET
        return self.reason is not None


def two_opt(
    costs: np.ndarray,
    order: Sequence[int],
    *,
    round_trip: bool = False,
    max_iterations: int = 1000,
    time_budget_seconds: Optional[float] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> tuple[List[int], int, int, Optional[str]]:
    """Return an improved copy of `order`, reversing sub-segments.

    The first index is fixed. Every applied move strictly lowers the cost, so
    stopping at any point leaves the best tour seen so far.

    Returns (order, passes, moves, stop_reason); stop_reason is None on
    convergence.
    """
    if time_budget_seconds is not None and time_budget_seconds <= 0:
        raise ValueError(f"time_budget_seconds must be positive, got {time_budget_seconds}")

    tour = list(order)
    n = len(tour)
    if n < 3:
        return tour, 0, 0, None

    stop = _StopCondition(time_budget_seconds, should_stop)
    passes = 0
    moves = 0
    while True:
        if passes >= max_iterations:
            return tour, passes, moves, STOP_ITERATION_CAP
        if stop.triggered():
            return tour, passes, moves, stop.reason
        passes += 1
        improved = False
        for i in range(1, n - 1):
            if stop.triggered():
                return tour, passes, moves, stop.reason
            a, b = tour[i - 1], tour[i]
            for k in range(i + 1, n):
                c = tour[k]
                if k + 1 < n:
                    d = tour[k + 1]
                elif round_trip:
                    d = tour[0]
                else:
                    d = None

                # Cost matrices are symmetric, so only the two boundary legs change.
                before = costs[a, b]
                after = costs[a, c]
                if d is not None:
                    before += costs[c, d]
                    after += costs[b, d]
                if after - before < -IMPROVEMENT_EPSILON * max(1.0, before):
                    tour[i : k + 1] = reversed(tour[i : k + 1])
                    moves += 1
                    improved = True
                    b = tour[i]
        if not improved:
            return tour, passes, moves, None


def solve_tour(
    costs: CostMatrix,
    distances: DistanceMatrix,
    *,
    start_index: int = 0,
    round_trip: bool = False,
    settings: Optional[Settings] = None,
    max_iterations: Optional[int] = None,
    time_budget_seconds: Optional[float] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> TourResult:
    """Order every index once, optimising `costs` but reporting `distances`.

    The reported distance is always summed from the raw matrix, whichever
    cost surface produced the order.
    """
    if costs.size != distances.size:
        raise ValueError(f"Matrix size mismatch: costs={costs.size}, distances={distances.size}")

    if time_budget_seconds is not None and time_budget_seconds <= 0:
        raise ValueError(f"time_budget_seconds must be positive, got {time_budget_seconds}")

    cfg = settings or default_settings
    n = distances.size
    if n < 2:
        return TourResult(order=list(range(n)), total_distance_km=0.0)
    if not 0 <= start_index < n:
        raise ValueError(f"start_index {start_index} is out of range for {n} points.")

    max_iterations = max_iterations if max_iterations is not None else cfg.two_opt_max_iterations
    if time_budget_seconds is None:
        time_budget_seconds = cfg.time_budget_seconds

    initial = nearest_neighbor_order(costs.values, start_index)
    initial_cost = tour_cost(costs.values, initial, round_trip=round_trip)
    order, passes, moves, stop_reason = two_opt(
        costs.values,
        initial,
        round_trip=round_trip,
        max_iterations=max_iterations,
        time_budget_seconds=time_budget_seconds,
        should_stop=should_stop,
    )
    final_cost = tour_cost(costs.values, order, round_trip=round_trip)

    if stop_reason:
        logger.warning(
            "2-opt stopped early (%s) after %d pass(es); returning best tour found", stop_reason, passes
        )
    logger.debug(
        "Tour solved for %d points: cost %.4f -> %.4f with %d move(s)", n, initial_cost, final_cost, moves
    )

    return TourResult(
        order=order,
        total_distance_km=path_distance_km(distances, order, round_trip=round_trip),
        total_cost=final_cost,
        iterations=passes,
        improvements=moves,
        converged=stop_reason is None,
        stop_reason=stop_reason,
    )
