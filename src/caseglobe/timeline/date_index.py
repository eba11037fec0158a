"""Sorted, dense index over the distinct observation dates.

The date index is the single axis every matrix and query uses. It is built
once from the dates seen during ingestion and never changes afterwards.

Lookups are strict: querying before ``build()`` raises DataNotLoaded, an
unknown timestamp raises UnknownDate, and an index outside
``[0, len(index))`` raises DateIndexOutOfRange. Clamping an index is a
navigation policy of the caller (see PlaybackController.seek), not something
this class does.
"""

import logging
import operator
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from caseglobe.core.errors import DataNotLoaded, DateIndexOutOfRange, UnknownDate

__all__ = ['DateIndex']

logger = logging.getLogger(__name__)


class DateIndex:
    """Dense index over sorted distinct dates.

    Examples
    --------
    >>> index = DateIndex.from_dates(["2020-01-23", "2020-01-22", "2020-01-23"])
    >>> len(index)
    2
    >>> index.index_of("2020-01-23")
    1
    >>> index.date_at(0)
    Timestamp('2020-01-22 00:00:00')
    """

    def __init__(self):
        self._dates: Optional[pd.DatetimeIndex] = None

    @classmethod
    def from_dates(cls, dates: Iterable) -> "DateIndex":
        index = cls()
        index.build(dates)
        return index

    def build(self, dates: Iterable) -> None:
        """Sort and deduplicate dates, assigning indices 0..N-1.

        Raises
        ------
        RuntimeError
            If the index was already built. Build a new DateIndex instead.
        """
        if self._dates is not None:
            raise RuntimeError("Date index already built; create a new DateIndex for new data")
        values = pd.DatetimeIndex(pd.to_datetime(list(dates)))
        self._dates = values.unique().sort_values()
        logger.debug("Date index built: %d distinct dates", len(self._dates))

    @property
    def is_ready(self) -> bool:
        return self._dates is not None

    def _require_ready(self) -> pd.DatetimeIndex:
        if self._dates is None:
            raise DataNotLoaded("Date index queried before ingestion completed")
        return self._dates

    def __len__(self) -> int:
        return len(self._require_ready())

    @property
    def dates(self) -> pd.DatetimeIndex:
        return self._require_ready()

    def index_of(self, timestamp) -> int:
        """Dense index of an observed date.

        Raises
        ------
        DataNotLoaded
            If called before build().
        UnknownDate
            If the timestamp was never observed.
        """
        dates = self._require_ready()
        ts = pd.Timestamp(timestamp)
        pos = int(dates.searchsorted(ts))
        if pos >= len(dates) or dates[pos] != ts:
            raise UnknownDate(f"Date {ts.date()} not in observed range")
        return pos

    def date_at(self, index: int) -> pd.Timestamp:
        """Timestamp at a dense index. Never clamps; non-integers raise TypeError."""
        dates = self._require_ready()
        index = operator.index(index)
        if not 0 <= index < len(dates):
            raise DateIndexOutOfRange(index, len(dates))
        return dates[index]

    def label(self, index: int, date_format: str = "%Y-%m-%d") -> str:
        """Human-readable label for the date at ``index``."""
        return self.date_at(index).strftime(date_format)

    def indices_for(self, timestamps) -> np.ndarray:
        """Vectorised index_of over many timestamps (all must be observed)."""
        dates = self._require_ready()
        values = pd.DatetimeIndex(pd.to_datetime(timestamps))
        positions = dates.get_indexer(values)
        if (positions < 0).any():
            missing = values[positions < 0][0]
            raise UnknownDate(f"Date {missing.date()} not in observed range")
        return positions.astype(np.int64)

    def __repr__(self) -> str:
        if self._dates is None:
            return "DateIndex(pending)"
        if len(self._dates) == 0:
            return "DateIndex(empty)"
        return f"DateIndex({len(self._dates)} dates, {self._dates[0].date()}..{self._dates[-1].date()})"
