"""ParamConfig: Expert defaults for the caseglobe engine.

This module defines the complete default configuration. ALL engine
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from caseglobe.schemas.base import CaseGlobeBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class IngestionConfig(CaseGlobeBaseModel):
    """CSV schema: fixed column positions of the case report file."""
    min_fields: int = Field(7, ge=1, description="Rows with fewer fields are dropped")
    country_column: int = Field(2, ge=0)
    latitude_column: int = Field(3, ge=0)
    longitude_column: int = Field(4, ge=0)
    date_column: int = Field(5, ge=0)
    count_column: int = Field(6, ge=0)
    two_digit_year_base: int = Field(2000, description="Added to years below 100")
    delimiter: str = Field(",", min_length=1)
    encoding: str = "utf-8"

    @model_validator(mode="after")
    def check_columns_within_min_fields(self):
        """Every configured column must exist in a row that passes min_fields."""
        columns = {
            "country_column": self.country_column,
            "latitude_column": self.latitude_column,
            "longitude_column": self.longitude_column,
            "date_column": self.date_column,
            "count_column": self.count_column,
        }
        for name, col in columns.items():
            if col >= self.min_fields:
                raise ValueError(
                    f"{name}={col} must be less than min_fields={self.min_fields}"
                )
        return self


class RegistryConfig(CaseGlobeBaseModel):
    """Location deduplication and projection settings."""
    key_precision: int = Field(
        4, ge=0, le=8,
        description="Decimal digits kept in location keys (4 digits merges points closer than ~11 m)",
    )
    sphere_radius: float = Field(1.5, gt=0)

    @field_validator("sphere_radius", mode="before")
    @classmethod
    def coerce_radius_to_float(cls, v):
        """Allow int or float for sphere_radius."""
        return float(v)


class QueryConfig(CaseGlobeBaseModel):
    """Query defaults used by the engine facade and CLI."""
    mode: Literal["cumulative", "daily"] = "daily"
    top_n: int = Field(10, ge=1, le=50)
    unknown_country: str = "Unknown"
    base_marker_size: float = Field(0.005, ge=0.001, le=0.5)

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        """Normalize mode names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class PlaybackConfig(CaseGlobeBaseModel):
    """Playback timer settings."""
    period_ms: int = Field(400, ge=100, le=2000, description="Milliseconds between ticks")
    autoplay: bool = False


class DisplayConfig(CaseGlobeBaseModel):
    """Date label formatting."""
    date_format: str = "%Y-%m-%d"


class LoggingConfig(CaseGlobeBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(CaseGlobeBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    input_path: Optional[str] = None
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
