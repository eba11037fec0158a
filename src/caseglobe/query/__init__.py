"""Per-date queries over the aggregated matrices.

- engine: Dense values per date, country totals, top-N rankings
"""

from caseglobe.query.engine import (
    DisplayMode,
    QueryEngine,
    country_totals,
    top_n,
    marker_scales,
    format_top_panel,
)

__all__ = [
    "DisplayMode",
    "QueryEngine",
    "country_totals",
    "top_n",
    "marker_scales",
    "format_top_panel",
]
