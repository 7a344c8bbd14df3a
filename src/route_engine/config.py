"""Engine configuration and settings management."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_ENGINE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    avg_speed_kmh: float = Field(
        default=40.0,
        gt=0.0,
        description="Average fleet speed used to turn kilometers into hours.",
    )
    service_time_hours: float = Field(
        default=0.25,
        ge=0.0,
        description="Time spent at each stop (hours).",
    )
    cross_cluster_penalty: float = Field(
        default=1.5,
        ge=1.0,
        description="Multiplier applied to legs that cross a cluster boundary.",
    )
    cluster_size: int = Field(default=5, ge=1, description="Target number of points per cluster.")
    min_clusters: int = Field(default=2, ge=1)
    kmeans_max_iterations: int = Field(default=20, ge=1)
    two_opt_max_iterations: int = Field(
        default=1000,
        ge=0,
        description="Upper bound on 2-opt improvement passes.",
    )
    time_budget_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Wall-clock budget for 2-opt; None means no limit.",
    )
    insights_round_digits: Optional[int] = Field(
        default=None,
        ge=0,
        description="Round reported insight figures to this many decimals.",
    )


settings = Settings()
