"""Aggregation stage contract.

Enforces the guarantee that the cumulative and daily matrices are dense,
aligned, and obey the carry-forward and clamping rules.
"""

import numpy as np
import xarray as xr

from caseglobe.contracts.base import require


def assert_aggregated(ds: xr.Dataset) -> None:
    """Enforce aggregation contract.

    Called immediately after TemporalAggregator.aggregate().

    Parameters
    ----------
    ds : xr.Dataset
        Dataset with ``raw``, ``reported``, ``cumulative`` and ``daily``
        variables over ``(location, date)``.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    for var in ("raw", "reported", "cumulative", "daily"):
        require(
            var in ds.data_vars,
            f"Aggregation contract violated: missing '{var}' variable"
        )
        require(
            ds[var].dims == ("location", "date"),
            f"Aggregation contract violated: '{var}' has dims {ds[var].dims}, expected ('location', 'date')"
        )

    cumulative = ds["cumulative"].values
    daily = ds["daily"].values
    reported = ds["reported"].values
    raw = ds["raw"].values

    require(
        cumulative.shape == daily.shape == reported.shape == raw.shape,
        "Aggregation contract violated: matrix shapes differ"
    )
    if cumulative.size == 0:
        return

    require(
        bool((daily >= 0).all()),
        "Aggregation contract violated: negative daily values"
    )
    require(
        bool((cumulative[reported] == raw[reported]).all()),
        "Aggregation contract violated: cumulative differs from reported value"
    )

    # Carry-forward: unreported cells repeat the previous cumulative value
    previous = np.concatenate(
        [np.zeros((cumulative.shape[0], 1), dtype=cumulative.dtype), cumulative[:, :-1]],
        axis=1,
    )
    require(
        bool((cumulative[~reported] == previous[~reported]).all()),
        "Aggregation contract violated: carry-forward broken at unreported dates"
    )
    require(
        bool((daily == np.maximum(cumulative - previous, 0)).all()),
        "Aggregation contract violated: daily is not the clamped cumulative delta"
    )
