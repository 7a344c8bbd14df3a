"""Route optimisation engine for dispatch planning."""

from .config import Settings, settings
from .models.domain import GeoPoint, OptimizationConfig
from .services.routing.service import explore_points, optimize_request, optimize_route, select_nearest_depot
from .services.routing.validation import InvalidPointError

__all__ = [
    "GeoPoint",
    "InvalidPointError",
    "OptimizationConfig",
    "Settings",
    "explore_points",
    "optimize_request",
    "optimize_route",
    "select_nearest_depot",
    "settings",
]
