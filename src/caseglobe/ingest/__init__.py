"""Case report ingestion.

- reader: Parse line-oriented CSV text into a sample table
"""

from caseglobe.ingest.reader import CaseCsvReader, IngestResult, parse_case_date, parse_count

__all__ = [
    "CaseCsvReader",
    "IngestResult",
    "parse_case_date",
    "parse_count",
]
