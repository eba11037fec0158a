"""Stage contracts - fail-fast enforcement of engine invariants.

Contracts fail immediately and loudly when a stage does not produce the
invariants it promised to the next one.

Key principle:
- Pydantic validates config correctness
- The reader absorbs dirty input (malformed rows are dropped)
- Contracts validate engine correctness
"""

from caseglobe.contracts.failure import ContractViolation
from caseglobe.contracts.base import require
from caseglobe.contracts.samples import assert_ingested
from caseglobe.contracts.matrices import assert_aggregated

__all__ = [
    "ContractViolation",
    "require",
    "assert_ingested",
    "assert_aggregated",
]
