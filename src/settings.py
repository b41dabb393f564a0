from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError


class EngineSettings(BaseSettings):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    environment: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8000, ge=1, le=65535)
    drivers_file: str = "data/drivers.json"
    session_idle_timeout_seconds: float = Field(default=1800.0, gt=0)
    max_sessions: int = Field(default=1000, ge=1)

    model_config = SettingsConfigDict(env_prefix="ENGINE_")


class RoutingSettings(BaseSettings):
    """Driving-directions service connection."""

    base_url: str = "https://api.mapbox.com"
    access_token: str = Field(default="", validate_default=True)
    profile: Literal["driving", "driving-traffic", "walking", "cycling"] = "driving"
    timeout_seconds: float = Field(default=5.0, gt=0.0, le=60.0)

    model_config = SettingsConfigDict(env_prefix="ROUTING_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Routing base URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("access_token")
    @classmethod
    def validate_access_token(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Required credential not provided: ROUTING_ACCESS_TOKEN")
        return v.strip()


class MatchingSettings(BaseSettings):
    """Candidate filtering and ranking configuration."""

    candidate_threshold_km: float = Field(
        default=3.0,
        gt=0.0,
        le=50.0,
        description="Max great-circle km between rider and driver for each leg (pickup, destination)",
    )
    nearby_threshold_m: float = Field(
        default=100.0,
        gt=0.0,
        le=5000.0,
        description="Radius in meters for nearby-driver pins around the pickup",
    )
    max_matches: int = Field(default=5, ge=1, le=20)
    max_concurrent_requests: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Upper bound on in-flight combined-route requests per search",
    )
    h3_resolution: int = Field(default=9, ge=5, le=12)

    model_config = SettingsConfigDict(env_prefix="MATCHING_")


class MapSettings(BaseSettings):
    """Map viewport and marker visibility configuration."""

    marker_zoom_ceiling: float = Field(
        default=17.0,
        ge=0.0,
        le=24.0,
        description="Driver markers are hidden while zoom is above this level",
    )
    default_center: tuple[float, float] = (105.8342, 21.0285)  # Hanoi (lon, lat)
    default_zoom: float = 13.0
    selection_zoom: float = 15.0
    pickup_only_zoom: float = 14.0
    fit_padding_vertical: int = Field(default=200, ge=0)
    fit_padding_horizontal: int = Field(default=50, ge=0)

    model_config = SettingsConfigDict(env_prefix="MAP_")


class WalletSettings(BaseSettings):
    """Starting credit balances for each new booking session."""

    bkcredit: int = Field(default=50_000, ge=0)
    bkcreditplus: int = Field(default=100_000, ge=0)

    model_config = SettingsConfigDict(env_prefix="WALLET_")


class PricingSettings(BaseSettings):
    base_fare_vnd: int = Field(default=10_000, ge=0)
    per_km_vnd: int = Field(default=15_000, ge=0)
    vnd_per_credit: int = Field(default=10, ge=1)

    model_config = SettingsConfigDict(env_prefix="PRICING_")


class Settings(BaseSettings):
    engine: EngineSettings = Field(default_factory=EngineSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()


def load_settings() -> Settings:
    """Load settings, reporting invalid or missing configuration as ConfigurationError."""
    try:
        return get_settings()
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid engine configuration: {e.error_count()} error(s)",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
