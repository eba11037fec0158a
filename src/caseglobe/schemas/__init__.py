"""Pydantic configuration schemas for the caseglobe engine.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from caseglobe.schemas.resolve import resolve_config
from caseglobe.schemas.internal import InternalConfig
from caseglobe.schemas.param import ParamConfig
from caseglobe.schemas.user import UserConfig
from caseglobe.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
