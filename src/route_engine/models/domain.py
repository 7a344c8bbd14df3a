"""Domain models for geographic stops."""

from dataclasses import dataclass
from typing import Hashable, Optional


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A stop supplied by the caller. The engine never mutates it."""

    id: Hashable
    lat: float
    lng: float
    label: Optional[str] = None


@dataclass(frozen=True, slots=True)
class OptimizationConfig:
    """Which cost criteria the solver should optimise against."""

    shortest_distance: bool = True
    fuel_efficiency: bool = False
    time_optimized: bool = False
    cluster_priority: bool = False

    def active(self) -> tuple[str, ...]:
        flags = (
            ("shortest_distance", self.shortest_distance),
            ("fuel_efficiency", self.fuel_efficiency),
            ("time_optimized", self.time_optimized),
            ("cluster_priority", self.cluster_priority),
        )
        return tuple(name for name, enabled in flags if enabled)
