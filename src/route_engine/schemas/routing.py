"""Route optimisation request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..models.domain import GeoPoint, OptimizationConfig

PointId = Union[int, str]


class PointModel(BaseModel):
    id: PointId
    lat: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)
    label: Optional[str] = None

    def to_domain(self) -> GeoPoint:
        return GeoPoint(id=self.id, lat=self.lat, lng=self.lng, label=self.label)


class OptimizationCriteria(BaseModel):
    shortest_distance: bool = True
    fuel_efficiency: bool = False
    time_optimized: bool = False
    cluster_priority: bool = False

    def to_domain(self) -> OptimizationConfig:
        return OptimizationConfig(
            shortest_distance=self.shortest_distance,
            fuel_efficiency=self.fuel_efficiency,
            time_optimized=self.time_optimized,
            cluster_priority=self.cluster_priority,
        )


class OptimizationRequest(BaseModel):
    points: List[PointModel]
    criteria: OptimizationCriteria = Field(default_factory=OptimizationCriteria)
    start_index: int = Field(default=0, ge=0)
    round_trip: bool = Field(
        default=False,
        description="If True, the tour returns to the start point and that leg is counted.",
    )
    time_budget_seconds: Optional[float] = Field(default=None, gt=0.0)
    include_insights: bool = True


class InsightRowModel(BaseModel):
    point_id: PointId
    label: Optional[str] = None
    distance_km: float


class RouteInsightsModel(BaseModel):
    mode: Literal["radial", "sequential"]
    count: int
    total_distance_km: float
    avg_distance_km: float
    min_distance_km: float
    max_distance_km: float
    estimated_duration_hours: float
    rows: List[InsightRowModel] = Field(default_factory=list)


class SolverDiagnostics(BaseModel):
    total_cost: float
    iterations: int
    improvements: int
    converged: bool
    stop_reason: Optional[str] = None


class OptimizationResponse(BaseModel):
    status: Literal["optimized", "nothing_to_optimize"]
    order: List[PointId]
    total_distance_km: float
    algorithm_label: str
    insights: Optional[RouteInsightsModel] = None
    excluded: List[PointId] = Field(default_factory=list)
    solver: SolverDiagnostics
