"""Read case report CSV files into a typed sample table.

This module turns raw comma-separated text into a ``pandas.DataFrame`` of
samples, one row per valid data row, ready for location registration and
date indexing. Parsing is best-effort over possibly dirty input: a row that
breaks the schema is dropped and counted, never raised.

Input schema (fixed positions, configurable through ``InternalConfig.ingestion``)::

    [unused, unused, country, latitude, longitude, date (M/D/Y[Y]), count]

Duplicate (location, date) rows are kept here; the aggregator sums them.
"""

import logging
import math
import re
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import numpy as np
import pandas as pd

from caseglobe.contracts import assert_ingested
from caseglobe.core.errors import MalformedRow
from caseglobe.geo.registry import location_key

if TYPE_CHECKING:
    from caseglobe.schemas import InternalConfig

__all__ = ['CaseCsvReader', 'IngestResult', 'parse_case_date', 'parse_count']

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# Whole days representable as datetime64[ns]
MIN_CASE_DATE = datetime(1677, 9, 22)
MAX_CASE_DATE = datetime(2262, 4, 11)

MAX_COUNT = int(np.iinfo(np.int64).max)


def parse_case_date(text: str, year_base: int = 2000) -> Optional[datetime]:
    """Parse an ``M/D/Y`` or ``M/D/YY`` date.

    Two-digit (and shorter) years are offset by ``year_base``. Anything after
    the third ``/``-separated part is ignored. Dates outside
    ``MIN_CASE_DATE..MAX_CASE_DATE`` cannot be stored and are rejected.

    Returns
    -------
    datetime or None
        None when the text has fewer than three parts, a part is not an
        integer, the parts do not form a calendar date, or the date is out
        of the storable range.

    Examples
    --------
    >>> parse_case_date("3/12/20")
    datetime.datetime(2020, 3, 12, 0, 0)
    >>> parse_case_date("2/30/2020") is None
    True
    """
    if not text:
        return None
    parts = text.strip().split("/")
    if len(parts) < 3:
        return None
    try:
        month, day, year = (int(p) for p in parts[:3])
    except ValueError:
        return None
    if 0 <= year < 100:
        year += year_base
    try:
        date = datetime(year, month, day)
    except ValueError:
        return None
    if not MIN_CASE_DATE <= date <= MAX_CASE_DATE:
        return None
    return date


def parse_count(text: Optional[str]) -> int:
    """Parse a report count from the leading integer of the text.

    Absent or non-numeric text gives 0, and so does a count too large for
    int64. Negative counts are clamped to 0.

    Examples
    --------
    >>> parse_count("42")
    42
    >>> parse_count("12.7")
    12
    >>> parse_count("n/a")
    0
    """
    if text is None:
        return 0
    match = _LEADING_INT.match(text)
    if match is None:
        return 0
    count = int(match.group(1))
    if count > MAX_COUNT:
        return 0
    return max(0, count)


def _parse_coordinate(text: str) -> Optional[float]:
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


class IngestResult:
    """Output of one ingestion pass.

    Attributes
    ----------
    samples : pd.DataFrame
        One row per valid data row, columns ``location_key``, ``country``,
        ``latitude``, ``longitude``, ``date`` (datetime64) and ``count``
        (int64), in input order.
    drop_reasons : Counter
        Number of dropped rows per reason.
    """

    def __init__(self, samples: pd.DataFrame, drop_reasons: Counter):
        self.samples = samples
        self.drop_reasons = drop_reasons

    @property
    def valid_rows(self) -> int:
        return len(self.samples)

    @property
    def dropped_rows(self) -> int:
        return sum(self.drop_reasons.values())

    @property
    def total_rows(self) -> int:
        return self.valid_rows + self.dropped_rows

    @property
    def is_empty(self) -> bool:
        return self.valid_rows == 0

    def distinct_dates(self) -> pd.DatetimeIndex:
        """Distinct dates in first-seen order."""
        return pd.DatetimeIndex(self.samples["date"].drop_duplicates())

    def distinct_location_keys(self) -> list[str]:
        """Distinct location keys in first-seen order."""
        return self.samples["location_key"].drop_duplicates().tolist()

    def __repr__(self) -> str:
        return (
            f"IngestResult(valid_rows={self.valid_rows}, "
            f"dropped_rows={self.dropped_rows})"
        )


class CaseCsvReader:
    """Parse case report CSV text into a sample table.

    Configuration
    =============
    Reads ``config.ingestion`` (column positions, ``min_fields``, year base,
    delimiter, encoding) and ``config.registry.key_precision`` for the
    location key attached to each sample.

    Notes
    -----
    - Blank lines are ignored; the first non-blank line is the header
    - Rows with too few fields or an unparseable latitude, longitude or
      date are dropped and counted per reason
    - File errors (missing file, bad encoding) propagate to the caller

    Examples
    --------
    >>> reader = CaseCsvReader(config)
    >>> result = reader.read("data/CV_LatLon_21Jan_12Mar.csv")
    >>> result.samples.head()
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        ingestion = config.ingestion
        self.min_fields = ingestion.min_fields
        self.country_column = ingestion.country_column
        self.latitude_column = ingestion.latitude_column
        self.longitude_column = ingestion.longitude_column
        self.date_column = ingestion.date_column
        self.count_column = ingestion.count_column
        self.year_base = ingestion.two_digit_year_base
        self.delimiter = ingestion.delimiter
        self.encoding = ingestion.encoding
        self.key_precision = config.registry.key_precision

    def read(self, filepath: Path | str) -> IngestResult:
        """Read and parse a CSV file.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        UnicodeDecodeError
            If the file is not valid in the configured encoding.
        """
        path = Path(filepath)
        logger.info("Reading case reports: %s", path)
        text = path.read_text(encoding=self.encoding)
        return self.parse(text)

    def parse(self, text: str) -> IngestResult:
        """Parse CSV text into an IngestResult."""
        records = {
            "location_key": [],
            "country": [],
            "latitude": [],
            "longitude": [],
            "date": [],
            "count": [],
        }
        drop_reasons = Counter()
        header_seen = False

        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            if not header_seen:
                header_seen = True
                continue

            try:
                country, lat, lon, date, count = self._parse_row(line, line_number)
            except MalformedRow as e:
                drop_reasons[e.reason] += 1
                logger.debug("Dropped: %s", e)
                continue

            records["location_key"].append(location_key(lat, lon, self.key_precision))
            records["country"].append(country)
            records["latitude"].append(lat)
            records["longitude"].append(lon)
            records["date"].append(date)
            records["count"].append(count)

        samples = pd.DataFrame({
            "location_key": pd.Series(records["location_key"], dtype=object),
            "country": pd.Series(records["country"], dtype=object),
            "latitude": np.asarray(records["latitude"], dtype=np.float64),
            "longitude": np.asarray(records["longitude"], dtype=np.float64),
            "date": pd.to_datetime(pd.Series(records["date"], dtype="datetime64[ns]")),
            "count": np.asarray(records["count"], dtype=np.int64),
        })
        assert_ingested(samples)

        result = IngestResult(samples, drop_reasons)
        if result.dropped_rows:
            logger.info(
                "Parsed %d rows: %d valid, %d dropped (%s)",
                result.total_rows, result.valid_rows, result.dropped_rows,
                ", ".join(f"{k}={v}" for k, v in sorted(drop_reasons.items())),
            )
        else:
            logger.info("Parsed %d rows: all valid", result.total_rows)
        return result

    def _parse_row(self, line: str, line_number: int):
        """Split one data row; raises MalformedRow if it breaks the schema."""
        cols = line.split(self.delimiter)
        if len(cols) < self.min_fields:
            raise MalformedRow("too_few_fields", line_number)

        lat = _parse_coordinate(cols[self.latitude_column])
        if lat is None:
            raise MalformedRow("bad_latitude", line_number)
        lon = _parse_coordinate(cols[self.longitude_column])
        if lon is None:
            raise MalformedRow("bad_longitude", line_number)
        date = parse_case_date(cols[self.date_column], self.year_base)
        if date is None:
            raise MalformedRow("bad_date", line_number)

        country = cols[self.country_column].strip()
        count = parse_count(cols[self.count_column])
        return country, lat, lon, date, count
