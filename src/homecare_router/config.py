"""Application configuration and settings management."""

from typing import Annotated, Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="HCR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Homecare Route Optimizer API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level applied by create_app().")

    geocoder: Literal["opencage", "nominatim"] = Field(
        default="opencage",
        description="Geocoding backend used to resolve free-text addresses.",
    )
    opencage_api_key: Optional[str] = Field(default=None, description="OpenCage API key.")
    opencage_base_url: str = "https://api.opencagedata.com"
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = Field(
        default="homecare-route-optimizer",
        description="User-Agent sent to Nominatim, required by its usage policy.",
    )

    routing_backend: Literal["openrouteservice", "mapbox"] = Field(
        default="openrouteservice",
        description="Routing/optimization backend.",
    )
    routing_mode: Literal["matrix", "directions"] = Field(
        default="matrix",
        description="OpenRouteService request variant. Ignored by Mapbox, which always optimizes the trip.",
    )
    ors_api_key: Optional[str] = Field(default=None, description="OpenRouteService API key.")
    ors_base_url: str = "https://api.openrouteservice.org"
    ors_profile: str = "driving-car"
    mapbox_access_token: Optional[str] = Field(default=None, description="Mapbox access token.")
    mapbox_base_url: str = "https://api.mapbox.com"
    mapbox_profile: str = "mapbox/driving"

    starting_point: Optional[str] = Field(
        default=None,
        description="Fixed starting address (e.g. the agency office). Geocoded on every run.",
    )
    geocode_concurrency: Literal["sequential", "concurrent"] = "sequential"
    geocode_max_workers: int = Field(default=4, ge=1)
    http_timeout_seconds: float = Field(default=15.0, gt=0.0)

    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("starting_point", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: Any) -> tuple[str, ...]:
        """Accept a JSON array or a comma-separated list of origins."""
        if isinstance(value, (list, tuple)):
            return tuple(str(item) for item in value)
        if not isinstance(value, str):
            return ()
        if value.lstrip().startswith("["):
            try:
                return tuple(str(item) for item in json.loads(value))
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid origin list: {e}") from e
        return tuple(origin.strip() for origin in value.split(",") if origin.strip())


settings = Settings()
