import numpy as np
import pytest

from route_engine.models.domain import GeoPoint
from route_engine.services.geospatial import haversine_km
from route_engine.services.routing.distance_matrix import build_distance_matrix, path_distance_km
from route_engine.services.routing.models import DistanceMatrix


def _points(coords):
    return [GeoPoint(f"P{index}", lat, lng) for index, (lat, lng) in enumerate(coords)]


SAMPLE = [
    (21.50, 39.20),
    (21.55, 39.25),
    (21.60, 39.10),
    (21.45, 39.30),
    (24.71, 46.67),
    (-33.86, 151.21),
]


@pytest.mark.parametrize("n", range(len(SAMPLE) + 1))
def test_matrix_is_square_symmetric_with_zero_diagonal(n):
    matrix = build_distance_matrix(_points(SAMPLE[:n]))

    assert matrix.values.shape == (n, n)
    assert np.array_equal(matrix.values, matrix.values.T)
    assert np.all(np.diag(matrix.values) == 0.0)
    assert np.all(matrix.values >= 0.0)


def test_matrix_entries_are_haversine_km():
    points = _points(SAMPLE)
    matrix = build_distance_matrix(points)

    for i, a in enumerate(points):
        for j, b in enumerate(points):
            if i != j:
                assert matrix.leg(i, j) == pytest.approx(haversine_km(a.lat, a.lng, b.lat, b.lng))


def test_empty_and_single_point_matrices():
    assert build_distance_matrix([]).size == 0
    single = build_distance_matrix(_points([(21.5, 39.2)]))
    assert single.values.tolist() == [[0.0]]


def test_matrix_is_read_only():
    matrix = build_distance_matrix(_points(SAMPLE[:3]))

    with pytest.raises(ValueError):
        matrix.values[0, 1] = 0.0


def test_distance_matrix_rejects_non_square_values():
    with pytest.raises(ValueError):
        DistanceMatrix(np.zeros((2, 3)))


def test_path_distance_sums_consecutive_legs():
    matrix = DistanceMatrix(np.array([[0.0, 1.0, 5.0], [1.0, 0.0, 2.0], [5.0, 2.0, 0.0]]))

    assert path_distance_km(matrix, [0, 1, 2]) == 3.0
    assert path_distance_km(matrix, [0, 1, 2], round_trip=True) == 8.0
    assert path_distance_km(matrix, [2]) == 0.0
