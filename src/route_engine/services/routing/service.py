"""Route optimisation orchestration service."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ...config import Settings, settings as default_settings
from ...models.domain import GeoPoint, OptimizationConfig
from ...schemas.routing import OptimizationRequest, OptimizationResponse
from ..geospatial import centroid, nearest_point
from ..outputs.routing_formatter import optimization_result_to_json
from .cost_matrix import DEFAULT_LABEL, compose_cost_matrix
from .distance_matrix import build_distance_matrix
from .insights import radial_insights, sequential_insights
from .models import OptimizationResult, RouteInsights, TourResult
from .solver import solve_tour
from .validation import coordinate_problem, partition_points

logger = logging.getLogger(__name__)

STATUS_OPTIMIZED = "optimized"
STATUS_NOTHING_TO_OPTIMIZE = "nothing_to_optimize"


def optimize_route(
    points: Sequence[GeoPoint],
    config: Optional[OptimizationConfig] = None,
    *,
    start_index: int = 0,
    settings: Optional[Settings] = None,
    strict: bool = False,
    round_trip: bool = False,
    time_budget_seconds: Optional[float] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    insights: bool = True,
) -> OptimizationResult:
    """Compute a visiting order for `points` under the selected criteria.

    `start_index` and `result.tour.order` both index the caller's list.
    Points with unusable coordinates are excluded and listed in
    `result.excluded` (or raise InvalidPointError with `strict`). An excluded
    start point hands over to the first usable one. Fewer than two usable
    points is not an error: the result carries status "nothing_to_optimize"
    and the usable points in input order.
    """
    cfg = settings or default_settings
    config = config or OptimizationConfig()

    if points and not 0 <= start_index < len(points):
        raise ValueError(f"start_index {start_index} is out of range for {len(points)} points.")

    kept_indices, valid_points = partition_points(points, strict=strict)
    kept = set(kept_indices)
    excluded = [point.id for index, point in enumerate(points) if index not in kept]

    local_start = 0
    if start_index in kept:
        local_start = kept_indices.index(start_index)
    elif valid_points:
        logger.warning(
            "Start point %r was excluded (%s); starting from %r instead",
            points[start_index].id,
            coordinate_problem(points[start_index]),
            valid_points[0].id,
        )

    if len(valid_points) < 2:
        logger.info("Nothing to optimise: %d usable point(s)", len(valid_points))
        return OptimizationResult(
            status=STATUS_NOTHING_TO_OPTIMIZE,
            point_ids=[point.id for point in valid_points],
            tour=TourResult(order=list(kept_indices), total_distance_km=0.0),
            algorithm_label=DEFAULT_LABEL,
            insights=sequential_insights(valid_points, round_trip=round_trip, settings=cfg) if insights else None,
            excluded=excluded,
        )

    distances = build_distance_matrix(valid_points)
    costs = compose_cost_matrix(distances, config, points=valid_points, settings=cfg)
    logger.info("Optimising %d points with '%s'", len(valid_points), costs.label)

    tour = solve_tour(
        costs,
        distances,
        start_index=local_start,
        round_trip=round_trip,
        settings=cfg,
        time_budget_seconds=time_budget_seconds,
        should_stop=should_stop,
    )
    logger.info(
        "Route optimised: %.2f km over %d stops (%d improvement(s), converged=%s)",
        tour.total_distance_km,
        len(tour.order),
        tour.improvements,
        tour.converged,
    )

    route_insights = None
    if insights:
        route_insights = sequential_insights(valid_points, tour.order, round_trip=round_trip, settings=cfg)
    point_ids = [valid_points[index].id for index in tour.order]
    # The solver indexed the usable points; callers index their own list.
    tour.order = [kept_indices[index] for index in tour.order]

    return OptimizationResult(
        status=STATUS_OPTIMIZED,
        point_ids=point_ids,
        tour=tour,
        algorithm_label=costs.label,
        insights=route_insights,
        excluded=excluded,
    )


def explore_points(
    points: Sequence[GeoPoint],
    center: Optional[tuple[float, float]] = None,
    *,
    settings: Optional[Settings] = None,
    sort_by: str = "distance",
    round_digits: Optional[int] = None,
) -> RouteInsights:
    """Radial insights for a candidate selection before any tour exists.

    Defaults to the selection's own centroid when no region centre is given.
    """
    _, valid_points = partition_points(points)
    if center is None:
        if not valid_points:
            return radial_insights([], (0.0, 0.0), settings=settings, round_digits=round_digits)
        center = centroid(valid_points)
    return radial_insights(
        valid_points,
        center,
        settings=settings,
        sort_by=sort_by,
        round_digits=round_digits,
    )


def select_nearest_depot(points: Sequence[GeoPoint], depots: Sequence[GeoPoint]) -> GeoPoint:
    """Pick the depot closest to the centroid of the usable points."""

    _, valid_points = partition_points(points)
    _, valid_depots = partition_points(depots)
    if not valid_points:
        raise ValueError("At least one point with valid coordinates is required.")
    if not valid_depots:
        raise ValueError("At least one depot with valid coordinates is required.")
    lat, lng = centroid(valid_points)
    return nearest_point(lat, lng, valid_depots)


def optimize_request(payload: OptimizationRequest, *, settings: Optional[Settings] = None) -> OptimizationResponse:
    """Schema level entry point for callers that speak dicts/JSON."""

    points = [point.to_domain() for point in payload.points]
    result = optimize_route(
        points,
        payload.criteria.to_domain(),
        start_index=payload.start_index,
        settings=settings,
        strict=True,
        round_trip=payload.round_trip,
        time_budget_seconds=payload.time_budget_seconds,
        insights=payload.include_insights,
    )
    return OptimizationResponse.model_validate(optimization_result_to_json(result))
