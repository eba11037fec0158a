"""CLIConfig: Command-line operational overrides.

Minimal configuration for settings that commonly change between runs:
input file, display mode, ranking size, playback period, verbosity.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from caseglobe.schemas.base import CaseGlobeBaseModel


class CLIConfig(CaseGlobeBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(input_path="cases.csv", mode="cumulative")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    input_path: Optional[str] = None
    mode: Optional[Literal["cumulative", "daily"]] = None
    top_n: Optional[int] = Field(None, ge=1)
    period_ms: Optional[int] = Field(None, ge=1)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.input_path is not None:
            overrides["input_path"] = str(self.input_path)

        query = {}
        if self.mode is not None:
            query["mode"] = self.mode
        if self.top_n is not None:
            query["top_n"] = self.top_n
        if query:
            overrides["query"] = query

        if self.period_ms is not None:
            overrides["playback"] = {"period_ms": self.period_ms}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
