"""Failure type for contract violations.

All violations raise the same exception type, so callers can tell engine
bugs apart from bad input or API misuse.
"""


class ContractViolation(RuntimeError):
    """Raised when a stage contract is violated.

    This indicates a bug in engine logic, not bad input rows (those are
    dropped by the reader) or a bad query (those raise CaseGlobeError
    subclasses).
    """
    pass
