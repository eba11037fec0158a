"""Build dense cumulative and daily matrices from sparse case reports.

Reports are point-in-time cumulative readings per location. The aggregator
turns them into two dense ``(location, date)`` matrices:

- **cumulative**: the reported value where a report exists, otherwise the
  previous date's cumulative value (carry-forward; 0 before the first
  report). A report replaces the running total, it is never added to it.
- **daily**: ``max(0, cumulative[d] - cumulative[d-1])``. A downward
  correction yields 0, so daily values do not always sum back to the final
  cumulative value.

Multiple reports for the same (location, date) are summed into one raw
report first.

The scan runs once, left to right over the sorted date axis, vectorised
across locations. O(locations x dates) time and memory.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
import xarray as xr

from caseglobe.contracts import assert_aggregated, require

if TYPE_CHECKING:
    from caseglobe.geo.registry import LocationRegistry
    from caseglobe.timeline.date_index import DateIndex

__all__ = ['TemporalAggregator', 'build_raw_matrix', 'carry_forward']

logger = logging.getLogger(__name__)


def build_raw_matrix(
    location_indices: np.ndarray,
    date_indices: np.ndarray,
    counts: np.ndarray,
    n_locations: int,
    n_dates: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Sum sample counts into a dense raw matrix plus a "reported" mask.

    Parameters
    ----------
    location_indices, date_indices : np.ndarray
        Dense indices of each sample.
    counts : np.ndarray
        Report count of each sample.
    n_locations, n_dates : int
        Matrix shape.

    Returns
    -------
    raw : np.ndarray
        int64 array (n_locations, n_dates); summed reports, 0 where none.
    reported : np.ndarray
        bool array (n_locations, n_dates); True where at least one report exists.
    """
    raw = np.zeros((n_locations, n_dates), dtype=np.int64)
    reported = np.zeros((n_locations, n_dates), dtype=bool)
    if len(counts) == 0:
        return raw, reported

    loc = np.asarray(location_indices, dtype=np.int64)
    day = np.asarray(date_indices, dtype=np.int64)
    np.add.at(raw, (loc, day), np.asarray(counts, dtype=np.int64))
    reported[loc, day] = True
    return raw, reported


def carry_forward(raw: np.ndarray, reported: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Derive cumulative and daily matrices with one left-to-right scan.

    For every date ``d`` (all locations at once)::

        cumulative[:, d] = raw[:, d] if reported[:, d] else prev
        daily[:, d]      = max(0, cumulative[:, d] - prev)
        prev             = cumulative[:, d]

    with ``prev`` starting at 0.

    Examples
    --------
    >>> raw = np.array([[100, 0, 150]])
    >>> reported = np.array([[True, False, True]])
    >>> cumulative, daily = carry_forward(raw, reported)
    >>> cumulative.tolist(), daily.tolist()
    ([[100, 100, 150]], [[100, 0, 50]])
    """
    require(
        raw.shape == reported.shape,
        f"Aggregation contract violated: raw {raw.shape} and reported {reported.shape} differ"
    )
    n_locations, n_dates = raw.shape
    cumulative = np.zeros((n_locations, n_dates), dtype=np.int64)
    daily = np.zeros((n_locations, n_dates), dtype=np.int64)

    prev = np.zeros(n_locations, dtype=np.int64)
    for d in range(n_dates):
        current = np.where(reported[:, d], raw[:, d], prev)
        cumulative[:, d] = current
        daily[:, d] = np.maximum(current - prev, 0)
        prev = current

    return cumulative, daily


class TemporalAggregator:
    """Turn the sample table into an immutable ``xarray.Dataset`` of matrices.

    The output dataset has dims ``(location, date)`` and variables:

    - ``raw`` (int64): summed reports per cell, 0 where unreported
    - ``reported`` (bool): whether a report exists for the cell
    - ``cumulative`` (int64): carry-forward cumulative counts
    - ``daily`` (int64): clamped daily deltas

    plus coordinates ``date`` and per-location ``key``, ``country``,
    ``latitude`` and ``longitude``.

    Examples
    --------
    >>> aggregator = TemporalAggregator()
    >>> ds = aggregator.aggregate(samples, registry, date_index)
    >>> ds["daily"].sel(date="2020-03-01").values
    """

    def aggregate(
        self,
        samples: pd.DataFrame,
        registry: "LocationRegistry",
        date_index: "DateIndex",
    ) -> xr.Dataset:
        """Build the matrices for every registered location and observed date.

        ``samples`` must carry ``location_index`` and ``date_index`` columns
        (added by the engine once locations and dates are registered).
        """
        n_locations = len(registry)
        n_dates = len(date_index)

        raw, reported = build_raw_matrix(
            samples["location_index"].to_numpy(),
            samples["date_index"].to_numpy(),
            samples["count"].to_numpy(),
            n_locations,
            n_dates,
        )
        cumulative, daily = carry_forward(raw, reported)

        ds = self._to_dataset(raw, reported, cumulative, daily, registry, date_index)
        assert_aggregated(ds)

        logger.info(
            "Aggregated %d samples into %d locations x %d dates (%d reported cells)",
            len(samples), n_locations, n_dates, int(reported.sum()),
        )
        return ds

    @staticmethod
    def _to_dataset(
        raw: np.ndarray,
        reported: np.ndarray,
        cumulative: np.ndarray,
        daily: np.ndarray,
        registry: "LocationRegistry",
        date_index: "DateIndex",
    ) -> xr.Dataset:
        dims = ("location", "date")
        locations = list(registry)
        for arr in (raw, reported, cumulative, daily):
            arr.flags.writeable = False

        return xr.Dataset(
            {
                "raw": (dims, raw),
                "reported": (dims, reported),
                "cumulative": (dims, cumulative),
                "daily": (dims, daily),
            },
            coords={
                "location": np.arange(len(locations), dtype=np.int64),
                "date": date_index.dates,
                "key": ("location", np.array([loc.key for loc in locations], dtype=object)),
                "country": ("location", np.array([loc.country for loc in locations], dtype=object)),
                "latitude": ("location", np.array([loc.latitude for loc in locations], dtype=np.float64)),
                "longitude": ("location", np.array([loc.longitude for loc in locations], dtype=np.float64)),
            },
            attrs={
                "description": "Dense cumulative and daily case counts",
                "carry_forward": "unreported dates repeat the previous cumulative value",
                "daily_clamp": "negative deltas clamped to 0",
            },
        )
