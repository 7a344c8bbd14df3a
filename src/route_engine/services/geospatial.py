"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def haversine_pairwise_km(lats: np.ndarray, lngs: np.ndarray) -> np.ndarray:
    """Vectorised Haversine distance between every pair of coordinates."""

    phi = np.radians(lats)
    lam = np.radians(lngs)
    d_phi = phi[:, None] - phi[None, :]
    d_lambda = lam[:, None] - lam[None, :]

    a = np.sin(d_phi / 2) ** 2 + np.cos(phi)[:, None] * np.cos(phi)[None, :] * np.sin(d_lambda / 2) ** 2
    # Rounding can push `a` a hair outside [0, 1] for antipodal pairs.
    a = np.clip(a, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def centroid(points: Sequence[GeoPoint]) -> tuple[float, float]:
    """Arithmetic mean of the coordinates, as (lat, lng)."""

    if not points:
        raise ValueError("Cannot compute the centroid of an empty point set.")
    lat = sum(point.lat for point in points) / len(points)
    lng = sum(point.lng for point in points) / len(points)
    return lat, lng


def nearest_point(lat: float, lng: float, candidates: Sequence[GeoPoint]) -> GeoPoint:
    """Return the candidate closest to (lat, lng); ties keep the earliest candidate."""

    if not candidates:
        raise ValueError("At least one candidate is required.")
    best = candidates[0]
    best_distance = haversine_km(lat, lng, best.lat, best.lng)
    for candidate in candidates[1:]:
        distance = haversine_km(lat, lng, candidate.lat, candidate.lng)
        if distance < best_distance:
            best, best_distance = candidate, distance
    return best
