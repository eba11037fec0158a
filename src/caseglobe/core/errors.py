"""Exception taxonomy for the case aggregation engine.

Key distinction:
- MalformedRow: bad input data, counted and dropped by the reader
- DataNotLoaded / DateIndexOutOfRange / UnknownDate: caller misuse of the
  query API, always raised
- ContractViolation (caseglobe.contracts): engine bug, a stage broke its
  promised invariants
"""


class CaseGlobeError(Exception):
    """Base class for all caseglobe errors raised to callers."""
    pass


class MalformedRow(CaseGlobeError, ValueError):
    """Raised by the row parser when a data row violates the input schema.

    The reader catches it, records ``reason`` and drops the row. It never
    escapes ingestion.
    """

    def __init__(self, reason: str, line_number: int | None = None):
        self.reason = reason
        self.line_number = line_number
        where = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"Malformed row{where}: {reason}")


class DataNotLoaded(CaseGlobeError, RuntimeError):
    """Raised when a lookup runs before ingestion and aggregation complete."""
    pass


class DateIndexOutOfRange(CaseGlobeError, IndexError):
    """Raised when a date index falls outside ``[0, date_count)``."""

    def __init__(self, index: int, date_count: int):
        self.index = index
        self.date_count = date_count
        super().__init__(
            f"Date index {index} out of range for {date_count} dates"
        )


class UnknownDate(CaseGlobeError, KeyError):
    """Raised when a timestamp was never observed during ingestion."""
    pass
