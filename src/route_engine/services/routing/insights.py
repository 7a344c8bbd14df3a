"""Descriptive statistics over a set of stops."""

from __future__ import annotations

from typing import List, Literal, Optional, Sequence

from ...config import Settings, settings as default_settings
from ...models.domain import GeoPoint
from ..geospatial import haversine_km
from .models import InsightRow, RouteInsights

MODE_RADIAL = "radial"
MODE_SEQUENTIAL = "sequential"

SortKey = Literal["distance", "name"]


def radial_insights(
    points: Sequence[GeoPoint],
    center: tuple[float, float],
    *,
    settings: Optional[Settings] = None,
    sort_by: SortKey = "distance",
    round_digits: Optional[int] = None,
) -> RouteInsights:
    """Statistics of each stop's distance from a fixed centre, e.g. a region centroid."""

    center_lat, center_lng = center
    rows = [
        InsightRow(
            point_id=point.id,
            label=point.label,
            distance_km=haversine_km(center_lat, center_lng, point.lat, point.lng),
        )
        for point in points
    ]
    distances = [row.distance_km for row in rows]
    return _summarize(MODE_RADIAL, len(points), distances, rows, settings, sort_by, round_digits)


def sequential_insights(
    points: Sequence[GeoPoint],
    order: Optional[Sequence[int]] = None,
    *,
    round_trip: bool = False,
    settings: Optional[Settings] = None,
    sort_by: Optional[SortKey] = None,
    round_digits: Optional[int] = None,
) -> RouteInsights:
    """Statistics of the legs between consecutive stops in visiting order.

    The first stop has no predecessor, so it contributes a row with a zero
    leg but no entry to the min/avg/max figures. Rows keep visiting order
    unless `sort_by` is given. With `round_trip` the leg back to the first
    stop counts towards the figures as well.
    """
    order = list(order) if order is not None else list(range(len(points)))
    visited = [points[index] for index in order]

    rows: List[InsightRow] = []
    legs: List[float] = []
    previous: Optional[GeoPoint] = None
    for point in visited:
        leg = 0.0
        if previous is not None:
            leg = haversine_km(previous.lat, previous.lng, point.lat, point.lng)
            legs.append(leg)
        rows.append(InsightRow(point_id=point.id, label=point.label, distance_km=leg))
        previous = point
    if round_trip and len(visited) > 1:
        legs.append(haversine_km(previous.lat, previous.lng, visited[0].lat, visited[0].lng))

    return _summarize(MODE_SEQUENTIAL, len(visited), legs, rows, settings, sort_by, round_digits)


def estimated_duration_hours(total_distance_km: float, stops: int, settings: Optional[Settings] = None) -> float:
    cfg = settings or default_settings
    return total_distance_km / cfg.avg_speed_kmh + stops * cfg.service_time_hours


def sort_rows(rows: Sequence[InsightRow], sort_by: SortKey) -> List[InsightRow]:
    if sort_by == "distance":
        return sorted(rows, key=lambda row: row.distance_km)
    if sort_by == "name":
        return sorted(rows, key=lambda row: (row.label or str(row.point_id)).lower())
    raise ValueError(f"Unknown insight sort key '{sort_by}'.")


def _summarize(
    mode: str,
    count: int,
    distances: Sequence[float],
    rows: List[InsightRow],
    settings: Optional[Settings],
    sort_by: Optional[SortKey],
    round_digits: Optional[int],
) -> RouteInsights:
    cfg = settings or default_settings
    if round_digits is None:
        round_digits = cfg.insights_round_digits

    total = float(sum(distances))
    insights = RouteInsights(
        mode=mode,
        count=count,
        total_distance_km=total,
        avg_distance_km=total / len(distances) if distances else 0.0,
        min_distance_km=min(distances) if distances else 0.0,
        max_distance_km=max(distances) if distances else 0.0,
        estimated_duration_hours=estimated_duration_hours(total, count, cfg),
        rows=sort_rows(rows, sort_by) if sort_by else rows,
    )
    if round_digits is not None:
        _round_in_place(insights, round_digits)
    return insights


def _round_in_place(insights: RouteInsights, digits: int) -> None:
    insights.total_distance_km = round(insights.total_distance_km, digits)
    insights.avg_distance_km = round(insights.avg_distance_km, digits)
    insights.min_distance_km = round(insights.min_distance_km, digits)
    insights.max_distance_km = round(insights.max_distance_km, digits)
    insights.estimated_duration_hours = round(insights.estimated_duration_hours, digits)
    for row in insights.rows:
        row.distance_km = round(row.distance_km, digits)
