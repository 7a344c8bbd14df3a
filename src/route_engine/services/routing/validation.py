"""Boundary checks for caller supplied stops."""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import replace
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from ...models.domain import GeoPoint

logger = logging.getLogger(__name__)


class InvalidPointError(ValueError):
    """Raised when a stop carries a missing, non-numeric or out-of-range coordinate."""

    def __init__(self, point_id, reason: str) -> None:
        super().__init__(f"Point {point_id!r} rejected: {reason}")
        self.point_id = point_id
        self.reason = reason


def coordinate_problem(point: GeoPoint) -> Optional[str]:
    """Describe why a point cannot be routed, or None if it is usable."""

    for name, value, bound in (("lat", point.lat, 90.0), ("lng", point.lng, 180.0)):
        if value is None:
            return f"{name} is missing"
        if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
            return f"{name} is not a real number ({value!r})"
        if isinstance(value, Decimal):
            if not value.is_finite():
                return f"{name} is not finite ({value!r})"
            value = float(value)
        if not math.isfinite(value):
            return f"{name} is not finite ({value!r})"
        if not -bound <= value <= bound:
            return f"{name} {value} is outside [-{bound:g}, {bound:g}]"
    return None


def _as_float_point(point: GeoPoint) -> GeoPoint:
    if isinstance(point.lat, Decimal) or isinstance(point.lng, Decimal):
        return replace(point, lat=float(point.lat), lng=float(point.lng))
    return point


def partition_points(
    points: Sequence[GeoPoint],
    *,
    strict: bool = False,
) -> Tuple[List[int], List[GeoPoint]]:
    """Split `points` into usable ones and report which input indices survived.

    Bad coordinates are never replaced by a default; the point is dropped (or
    the call fails when `strict` is set). Decimal coordinates come back as
    floats.
    """
    kept: List[int] = []
    for index, point in enumerate(points):
        problem = coordinate_problem(point)
        if problem is None:
            kept.append(index)
            continue
        if strict:
            raise InvalidPointError(point.id, problem)
        logger.warning("Excluding point %r from optimisation: %s", point.id, problem)

    return kept, [_as_float_point(points[index]) for index in kept]
