import logging
from decimal import Decimal

import pytest
from pydantic import ValidationError

from route_engine.models.domain import GeoPoint, OptimizationConfig
from route_engine.schemas.routing import OptimizationRequest
from route_engine.services.geospatial import haversine_km
from route_engine.services.routing import service as routing_service
from route_engine.services.routing.validation import InvalidPointError


def _point(pid, lat, lng, label=None) -> GeoPoint:
    return GeoPoint(pid, lat, lng, label)


def _facilities():
    return [
        _point("F1", 21.50, 39.20, "Central Clinic"),
        _point("F2", 21.55, 39.25, "North Post"),
        _point("F3", 21.60, 39.10, "Harbour"),
        _point("F4", 21.45, 39.30, "East Gate"),
        _point("F5", 21.52, 39.18, "Market"),
    ]


def test_optimize_route_returns_ids_in_visiting_order():
    points = _facilities()

    result = routing_service.optimize_route(points)

    assert result.status == "optimized"
    assert result.optimized
    assert sorted(result.point_ids) == sorted(p.id for p in points)
    assert result.point_ids[0] == "F1"
    assert result.algorithm_label == "Shortest Distance"
    assert result.excluded == []
    assert result.insights is not None
    assert result.insights.mode == "sequential"
    assert result.insights.total_distance_km == pytest.approx(result.tour.total_distance_km)


def test_optimize_route_uses_combined_label():
    config = OptimizationConfig(shortest_distance=False, time_optimized=True, cluster_priority=True)

    result = routing_service.optimize_route(_facilities(), config)

    assert result.algorithm_label == "Time Optimized + Cluster Priority"


def test_start_index_refers_to_caller_list():
    points = _facilities()

    result = routing_service.optimize_route(points, start_index=3)

    assert result.point_ids[0] == "F4"


def test_invalid_points_are_excluded_not_relocated(caplog):
    points = _facilities() + [
        _point("BAD_LAT", 95.0, 39.2),
        _point("NAN", float("nan"), 39.2),
        _point("TEXT", "21.5", 39.2),
        _point("MISSING", None, 39.2),
        _point("BOOL", True, 39.2),
    ]

    with caplog.at_level(logging.WARNING):
        result = routing_service.optimize_route(points)

    assert result.excluded == ["BAD_LAT", "NAN", "TEXT", "MISSING", "BOOL"]
    assert sorted(result.point_ids) == ["F1", "F2", "F3", "F4", "F5"]
    assert "Excluding point 'BAD_LAT'" in caplog.text


def test_strict_mode_rejects_invalid_points():
    points = _facilities() + [_point("BAD_LNG", 21.5, 181.0)]

    with pytest.raises(InvalidPointError) as excinfo:
        routing_service.optimize_route(points, strict=True)

    assert excinfo.value.point_id == "BAD_LNG"
    assert isinstance(excinfo.value, ValueError)


def test_excluded_start_point_hands_over_to_first_usable():
    points = [_point("BAD", -91.0, 0.0)] + _facilities()

    result = routing_service.optimize_route(points, start_index=0)

    assert result.excluded == ["BAD"]
    assert result.point_ids[0] == "F1"


def test_start_index_is_remapped_past_excluded_points():
    points = [_point("BAD", -91.0, 0.0)] + _facilities()

    result = routing_service.optimize_route(points, start_index=2)

    assert result.point_ids[0] == "F2"


def test_out_of_range_start_index_is_rejected():
    with pytest.raises(ValueError):
        routing_service.optimize_route(_facilities(), start_index=9)


def test_single_point_is_nothing_to_optimize():
    result = routing_service.optimize_route([_point("ONLY", 21.5, 39.2)])

    assert result.status == "nothing_to_optimize"
    assert not result.optimized
    assert result.point_ids == ["ONLY"]
    assert result.tour.order == [0]
    assert result.tour.total_distance_km == 0.0


def test_empty_input_is_nothing_to_optimize():
    result = routing_service.optimize_route([])

    assert result.status == "nothing_to_optimize"
    assert result.point_ids == []
    assert result.tour.order == []
    assert result.tour.total_distance_km == 0.0


def test_insights_can_be_skipped():
    result = routing_service.optimize_route(_facilities(), insights=False)

    assert result.insights is None


def test_round_trip_reports_return_leg():
    points = _facilities()
    by_id = {p.id: p for p in points}

    result = routing_service.optimize_route(points, round_trip=True)

    stops = [by_id[pid] for pid in result.point_ids] + [by_id[result.point_ids[0]]]
    expected = sum(haversine_km(a.lat, a.lng, b.lat, b.lng) for a, b in zip(stops, stops[1:]))
    assert result.tour.total_distance_km == pytest.approx(expected)
    assert result.insights.total_distance_km == pytest.approx(expected)


def test_optimize_request_round_trips_through_schemas():
    payload = OptimizationRequest.model_validate(
        {
            "points": [{"id": p.id, "lat": p.lat, "lng": p.lng, "label": p.label} for p in _facilities()],
            "criteria": {"shortest_distance": True, "fuel_efficiency": True},
            "start_index": 1,
        }
    )

    response = routing_service.optimize_request(payload)

    assert response.status == "optimized"
    assert response.order[0] == "F2"
    assert response.algorithm_label == "Shortest Distance + Fuel Efficient"
    assert response.insights is not None
    assert response.insights.count == 5
    assert response.solver.converged


def test_request_schema_rejects_out_of_range_coordinates():
    with pytest.raises(ValidationError):
        OptimizationRequest.model_validate({"points": [{"id": "X", "lat": 120.0, "lng": 0.0}]})


def test_explore_points_defaults_to_selection_centroid():
    points = [_point("A", 0.0, -1.0), _point("B", 0.0, 1.0), _point("BAD", 200.0, 0.0)]

    insights = routing_service.explore_points(points)

    assert insights.mode == "radial"
    assert insights.count == 2
    assert insights.min_distance_km == pytest.approx(haversine_km(0.0, 0.0, 0.0, 1.0))


def test_explore_points_with_region_center():
    points = _facilities()

    insights = routing_service.explore_points(points, (21.5, 39.2), round_digits=1)

    assert insights.rows[0].point_id == "F1"
    assert insights.rows[0].distance_km == 0.0


def test_select_nearest_depot_uses_point_centroid():
    depots = [_point("JED", 21.54, 39.17), _point("RUH", 24.71, 46.67)]

    depot = routing_service.select_nearest_depot(_facilities(), depots)

    assert depot.id == "JED"


def test_select_nearest_depot_requires_valid_depots():
    with pytest.raises(ValueError):
        routing_service.select_nearest_depot(_facilities(), [_point("BAD", 100.0, 0.0)])


def test_tour_order_indexes_the_caller_list_when_points_are_excluded():
    points = [_point("BAD", 95.0, 0.0)] + _facilities()

    result = routing_service.optimize_route(points, start_index=1)

    assert result.excluded == ["BAD"]
    assert 0 not in result.tour.order
    assert sorted(result.tour.order) == [1, 2, 3, 4, 5]
    assert [points[i].id for i in result.tour.order] == result.point_ids
    assert result.point_ids[0] == "F1"


def test_nothing_to_optimize_order_indexes_the_caller_list():
    points = [_point("BAD", 95.0, 0.0), _point("ONLY", 21.5, 39.2)]

    result = routing_service.optimize_route(points)

    assert result.status == "nothing_to_optimize"
    assert result.tour.order == [1]
    assert [points[i].id for i in result.tour.order] == result.point_ids == ["ONLY"]


def test_decimal_coordinates_are_accepted():
    points = _facilities() + [_point("DEC", Decimal("21.58"), Decimal("39.22"))]

    result = routing_service.optimize_route(points)

    assert result.excluded == []
    assert "DEC" in result.point_ids


def test_non_finite_decimal_is_excluded():
    points = _facilities() + [_point("DEC_NAN", Decimal("NaN"), Decimal("39.2"))]

    result = routing_service.optimize_route(points)

    assert result.excluded == ["DEC_NAN"]
