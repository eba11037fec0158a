"""Ingestion stage contract.

Enforces the guarantee that the reader hands the registry and date index a
well-typed sample table.
"""

import numpy as np
import pandas as pd

from caseglobe.contracts.base import require

SAMPLE_COLUMNS = ("location_key", "country", "latitude", "longitude", "date", "count")


def assert_ingested(samples: pd.DataFrame) -> None:
    """Enforce ingestion contract.

    Called on the reader's output before any location or date is registered.

    Parameters
    ----------
    samples : pd.DataFrame
        Sample table from CaseCsvReader.

    Raises
    ------
    ContractViolation
        If a column is missing, mistyped, or a count is negative.
    """
    for col in SAMPLE_COLUMNS:
        require(
            col in samples.columns,
            f"Ingestion contract violated: missing '{col}' column"
        )

    require(
        pd.api.types.is_datetime64_any_dtype(samples["date"]),
        f"Ingestion contract violated: 'date' has dtype {samples['date'].dtype}, expected datetime64"
    )
    require(
        pd.api.types.is_integer_dtype(samples["count"]),
        f"Ingestion contract violated: 'count' has dtype {samples['count'].dtype}, expected integer"
    )

    if len(samples) == 0:
        return

    require(
        bool((samples["count"] >= 0).all()),
        "Ingestion contract violated: negative report counts"
    )
    require(
        bool(np.isfinite(samples[["latitude", "longitude"]].to_numpy(dtype=float)).all()),
        "Ingestion contract violated: non-finite coordinates"
    )
    require(
        not samples["date"].isna().any(),
        "Ingestion contract violated: missing dates"
    )
