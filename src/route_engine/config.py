"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_ENGINE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Optimization & Simulation Engine"
    api_prefix: str = "/api"
    max_stops: int = Field(default=25, ge=1, description="Maximum stops accepted per request.")
    two_opt_epsilon: float = Field(
        default=0.001,
        ge=0.0,
        description="Minimum gain (in matrix units) for a 2-opt reversal to be applied.",
    )

    routing_provider: Literal["osrm", "mapbox"] = Field(
        default="osrm",
        description="Flavour of the external routing service.",
    )
    routing_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the routing service (e.g., http://localhost:5000 or https://api.mapbox.com).",
    )
    routing_profile: str = Field(default="driving", description="Routing profile used for directions and matrices.")
    routing_access_token: Optional[str] = Field(
        default=None,
        description="Access token appended to Mapbox requests.",
    )
    routing_timeout_seconds: float = Field(default=15.0, gt=0.0)
    routing_max_retries: int = Field(default=2, ge=0)
    routing_backoff_seconds: float = Field(default=0.5, ge=0.0)

    fallback_speed_kmh: float = Field(default=40.0, gt=0.0, description="Assumed speed for synthesized routes.")
    fallback_step: float = Field(default=0.05, gt=0.0, le=1.0)
    fallback_curve_offset: float = Field(default=0.003, ge=0.0)

    simulation_base_rate: float = Field(
        default=0.0003,
        gt=0.0,
        description="Progress added per reference frame at speed 1.",
    )
    simulation_reference_frame_ms: float = Field(default=16.0, gt=0.0)
    simulation_max_frame_ms: float = Field(
        default=200.0,
        gt=0.0,
        description="Ticks with a longer elapsed time are treated as dropped frames.",
    )
    simulation_speeds: tuple[float, ...] = Field(default=(1.0, 2.0, 4.0))

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("simulation_speeds", mode="before")
    @classmethod
    def _parse_float_tuple_from_env(cls, value: Any) -> tuple[float, ...]:
        """Parse float tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return tuple(float(item) for item in value)
        if isinstance(value, list):
            return tuple(float(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(float(item) for item in parsed)
            except (json.JSONDecodeError, TypeError, ValueError):
                pass
            if "," in value:
                return tuple(float(item.strip()) for item in value.split(",") if item.strip())
            if value.strip():
                try:
                    return (float(value.strip()),)
                except ValueError:
                    return tuple()
        return tuple()

    @field_validator("simulation_speeds")
    @classmethod
    def _require_positive_speeds(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        speeds = tuple(sorted(speed for speed in value if speed > 0))
        if not speeds:
            raise ValueError("At least one positive simulation speed is required.")
        return speeds


settings = Settings()
