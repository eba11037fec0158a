"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains no optional fields that processing code depends on.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from caseglobe.schemas.base import CaseGlobeBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalIngestionConfig(CaseGlobeBaseModel):
    """Runtime CSV schema."""
    min_fields: int
    country_column: int
    latitude_column: int
    longitude_column: int
    date_column: int
    count_column: int
    two_digit_year_base: int
    delimiter: str
    encoding: str


class InternalRegistryConfig(CaseGlobeBaseModel):
    """Runtime registry configuration."""
    key_precision: int
    sphere_radius: float


class InternalQueryConfig(CaseGlobeBaseModel):
    """Runtime query configuration."""
    mode: Literal["cumulative", "daily"]
    top_n: int = Field(ge=1, le=50)
    unknown_country: str
    base_marker_size: float


class InternalPlaybackConfig(CaseGlobeBaseModel):
    """Runtime playback configuration."""
    period_ms: int = Field(ge=1)
    autoplay: bool


class InternalDisplayConfig(CaseGlobeBaseModel):
    """Runtime display configuration."""
    date_format: str


class InternalLoggingConfig(CaseGlobeBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(CaseGlobeBaseModel):
    """Authoritative runtime configuration.

    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.precision = config.registry.key_precision  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    input_path: Optional[str]
    ingestion: InternalIngestionConfig
    registry: InternalRegistryConfig
    query: InternalQueryConfig
    playback: InternalPlaybackConfig
    display: InternalDisplayConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,
    )
