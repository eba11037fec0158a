"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with aliases for common naming patterns
(e.g., TOP_N → top_n, MODE → mode). Users only specify what they want to
override from the expert defaults.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from caseglobe.schemas.base import CaseGlobeBaseModel


class UserIngestionConfig(CaseGlobeBaseModel):
    """User-facing CSV schema overrides."""
    min_fields: Optional[int] = None
    country_column: Optional[int] = None
    latitude_column: Optional[int] = None
    longitude_column: Optional[int] = None
    date_column: Optional[int] = None
    count_column: Optional[int] = None
    two_digit_year_base: Optional[int] = None
    delimiter: Optional[str] = None
    encoding: Optional[str] = None


class UserRegistryConfig(CaseGlobeBaseModel):
    """User-facing registry config."""
    key_precision: Optional[int] = None
    sphere_radius: Optional[float] = None


class UserQueryConfig(CaseGlobeBaseModel):
    """User-facing query config."""
    mode: Optional[str] = None
    top_n: Optional[int] = None
    unknown_country: Optional[str] = None
    base_marker_size: Optional[float] = None

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        """Normalize mode names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserPlaybackConfig(CaseGlobeBaseModel):
    """User-facing playback config."""
    period_ms: Optional[int] = None
    autoplay: Optional[bool] = None


class UserConfig(CaseGlobeBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Converted to internal
    overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            input_path="data/cases.csv",
            mode="cumulative",
            top_n=15,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    input_path: Optional[str] = Field(None, alias="INPUT_PATH")

    # Query settings (flat aliases)
    mode: Optional[Literal["cumulative", "daily"]] = Field(None, alias="MODE")
    top_n: Optional[int] = Field(None, alias="TOP_N")
    unknown_country: Optional[str] = Field(None, alias="UNKNOWN_COUNTRY")
    base_marker_size: Optional[float] = Field(None, alias="BASE_MARKER_SIZE")

    # Playback settings
    period_ms: Optional[int] = Field(None, alias="PERIOD_MS")
    autoplay: Optional[bool] = Field(None, alias="AUTOPLAY")

    # Registry settings
    key_precision: Optional[int] = Field(None, alias="KEY_PRECISION")
    sphere_radius: Optional[float] = Field(None, alias="SPHERE_RADIUS")

    # Display / logging
    date_format: Optional[str] = Field(None, alias="DATE_FORMAT")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    ingestion: Optional[UserIngestionConfig] = None
    registry: Optional[UserRegistryConfig] = None
    query: Optional[UserQueryConfig] = None
    playback: Optional[UserPlaybackConfig] = None

    model_config = CaseGlobeBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        """Normalize mode names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    @field_validator("sphere_radius", "base_marker_size", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.input_path is not None:
            overrides["input_path"] = str(self.input_path)

        if self.ingestion is not None:
            ingestion = self.ingestion.explicit_values()
            if ingestion:
                overrides["ingestion"] = ingestion

        # Registry section
        registry = {}
        if self.key_precision is not None:
            registry["key_precision"] = self.key_precision
        if self.sphere_radius is not None:
            registry["sphere_radius"] = self.sphere_radius
        if self.registry is not None:
            registry.update(self.registry.explicit_values())
        if registry:
            overrides["registry"] = registry

        # Query section
        query = {}
        if self.mode is not None:
            query["mode"] = self.mode
        if self.top_n is not None:
            query["top_n"] = self.top_n
        if self.unknown_country is not None:
            query["unknown_country"] = self.unknown_country
        if self.base_marker_size is not None:
            query["base_marker_size"] = self.base_marker_size
        if self.query is not None:
            query.update(self.query.explicit_values())
        if query:
            overrides["query"] = query

        # Playback section
        playback = {}
        if self.period_ms is not None:
            playback["period_ms"] = self.period_ms
        if self.autoplay is not None:
            playback["autoplay"] = self.autoplay
        if self.playback is not None:
            playback.update(self.playback.explicit_values())
        if playback:
            overrides["playback"] = playback

        if self.date_format is not None:
            overrides["display"] = {"date_format": self.date_format}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
