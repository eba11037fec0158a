"""Core definitions shared by every caseglobe stage.

This module provides the exception taxonomy used at the engine's public
boundary.
"""

from caseglobe.core.errors import (
    CaseGlobeError,
    MalformedRow,
    DataNotLoaded,
    DateIndexOutOfRange,
    UnknownDate,
)

__all__ = [
    'CaseGlobeError',
    'MalformedRow',
    'DataNotLoaded',
    'DateIndexOutOfRange',
    'UnknownDate',
]
