"""Serializers for route optimisation outputs."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict
from typing import Sequence

from ...models.domain import GeoPoint
from ..geospatial import haversine_km
from ..routing.models import OptimizationResult

FALLBACK_ALGORITHM = "nearest_neighbor_2opt"


def optimization_result_to_json(result: OptimizationResult) -> dict:
    tour = result.tour
    return {
        "status": result.status,
        "order": list(result.point_ids),
        "total_distance_km": tour.total_distance_km,
        "algorithm_label": result.algorithm_label,
        "insights": asdict(result.insights) if result.insights else None,
        "excluded": list(result.excluded),
        "solver": {
            "total_cost": tour.total_cost,
            "iterations": tour.iterations,
            "improvements": tour.improvements,
            "converged": tour.converged,
            "stop_reason": tour.stop_reason,
        },
    }


def optimization_result_to_csv(result: OptimizationResult, points: Sequence[GeoPoint]) -> str:
    """One row per stop in visiting order with leg and running distance.

    `points` is the list the route was optimised from; `result.tour.order`
    indexes into it, so stops sharing an id keep their own coordinates.
    """

    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "point_id",
        "label",
        "latitude",
        "longitude",
        "distance_from_prev_km",
        "cumulative_km",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    cumulative = 0.0
    previous = None
    for sequence, index in enumerate(result.tour.order, start=1):
        point = points[index]
        leg = 0.0
        if previous is not None:
            leg = haversine_km(previous.lat, previous.lng, point.lat, point.lng)
        cumulative += leg
        writer.writerow(
            {
                "sequence": sequence,
                "point_id": point.id,
                "label": point.label or "",
                "latitude": point.lat,
                "longitude": point.lng,
                "distance_from_prev_km": leg,
                "cumulative_km": cumulative,
            }
        )
        previous = point
    return buffer.getvalue()


def route_metadata(result: OptimizationResult) -> dict:
    """Record a persistence layer stores next to the route."""

    return {
        "point_ids": list(result.point_ids),
        "algorithm_used": (result.algorithm_label or FALLBACK_ALGORITHM) if result.optimized else None,
        "total_distance_km": round(result.tour.total_distance_km, 1),
    }
