"""Read per-date values and country rankings from precomputed matrices.

Every function here is a pure read over the immutable aggregation dataset:
no recomputation, no hidden state, safe to call repeatedly.
"""

import logging
import operator
from enum import Enum
from typing import Mapping, Sequence

import numpy as np
import xarray as xr

from caseglobe.core.errors import DateIndexOutOfRange

__all__ = [
    'DisplayMode',
    'QueryEngine',
    'country_totals',
    'top_n',
    'marker_scales',
    'format_top_panel',
]

logger = logging.getLogger(__name__)

HIDDEN_MARKER_SCALE = 1e-6


class DisplayMode(str, Enum):
    """Which matrix a query reads."""
    CUMULATIVE = "cumulative"
    DAILY = "daily"


def country_totals(
    values: np.ndarray,
    countries: Sequence[str],
    unknown_label: str = "Unknown",
) -> dict[str, int]:
    """Sum per-location values by country.

    Non-positive values are skipped, so a country with nothing positive does
    not appear. Countries appear in the order their first positive location
    is encountered. Empty country names are reported as ``unknown_label``.
    """
    if len(values) != len(countries):
        raise ValueError(
            f"values has {len(values)} entries but there are {len(countries)} locations"
        )
    totals: dict[str, int] = {}
    for value, country in zip(values.tolist(), countries):
        if value <= 0:
            continue
        name = country or unknown_label
        totals[name] = totals.get(name, 0) + value
    return totals


def top_n(totals: Mapping[str, int], n: int) -> list[tuple[str, int]]:
    """Rank totals descending, keeping first-encountered order on ties.

    Examples
    --------
    >>> top_n({"Italy": 5, "China": 9, "Iran": 5}, 2)
    [('China', 9), ('Italy', 5)]
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked[:n]


def marker_scales(
    values: np.ndarray,
    base_size: float,
    hidden_scale: float = HIDDEN_MARKER_SCALE,
) -> np.ndarray:
    """Marker size per location for a renderer.

    ``cbrt(v + 1) * base_size`` for positive values, ``hidden_scale``
    otherwise.
    """
    values = np.asarray(values, dtype=np.float64)
    return np.where(values > 0, np.cbrt(values + 1.0) * base_size, hidden_scale)


def format_top_panel(ranking: Sequence[tuple[str, int]], title: str = "Top countries") -> str:
    """Plain-text ranking panel, one ``rank. country: total`` line per entry."""
    lines = [title, ""]
    if not ranking:
        lines.append("No data")
    for rank, (country, total) in enumerate(ranking, start=1):
        lines.append(f"{rank}. {country}: {total}")
    return "\n".join(lines)


class QueryEngine:
    """Answer per-date queries from an aggregation dataset.

    Parameters
    ----------
    matrices : xr.Dataset
        Output of TemporalAggregator.aggregate(): ``cumulative`` and
        ``daily`` over ``(location, date)`` with a ``country`` coordinate.
    unknown_country : str
        Label for locations without a country name.

    Notes
    -----
    - An empty dataset (no dates) answers every query with an empty array
      or an empty ranking instead of raising
    - Otherwise a date index outside ``[0, date_count)`` raises
      DateIndexOutOfRange; negative indices are not interpreted from the end

    Examples
    --------
    >>> engine = QueryEngine(ds)
    >>> engine.values_for_date(0, "cumulative")
    array([100,  20])
    >>> engine.top_countries(0, "cumulative", 1)
    [('China', 100)]
    """

    def __init__(self, matrices: xr.Dataset, unknown_country: str = "Unknown"):
        self.matrices = matrices
        self.unknown_country = unknown_country
        self._countries = [str(c) for c in matrices["country"].values.tolist()]

    @property
    def location_count(self) -> int:
        return int(self.matrices.sizes["location"])

    @property
    def date_count(self) -> int:
        return int(self.matrices.sizes["date"])

    @property
    def countries(self) -> list[str]:
        return list(self._countries)

    def is_empty(self) -> bool:
        return self.date_count == 0

    def check_date_index(self, date_index: int) -> int:
        """Validate a date index against the observed range.

        Raises
        ------
        TypeError
            If ``date_index`` is not an integer.
        DateIndexOutOfRange
            If it falls outside ``[0, date_count)``.
        """
        date_index = operator.index(date_index)
        if not 0 <= date_index < self.date_count:
            raise DateIndexOutOfRange(date_index, self.date_count)
        return date_index

    def values_for_date(self, date_index: int, mode: DisplayMode | str) -> np.ndarray:
        """Dense per-location values for one date.

        Returns a fresh array of length ``location_count``; mutating it does
        not affect the engine.
        """
        mode = DisplayMode(mode)
        if self.is_empty():
            return np.zeros(self.location_count, dtype=np.int64)
        date_index = self.check_date_index(date_index)
        return self.matrices[mode.value].values[:, date_index].copy()

    def country_totals(self, values: np.ndarray) -> dict[str, int]:
        return country_totals(values, self._countries, self.unknown_country)

    def top_countries(self, date_index: int, mode: DisplayMode | str, n: int) -> list[tuple[str, int]]:
        """Top ``n`` countries by total for one date and mode."""
        values = self.values_for_date(date_index, mode)
        return top_n(self.country_totals(values), n)
