"""Base contract enforcement utility."""

from caseglobe.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a stage contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.

    message : str
        Explanation used as the ContractViolation message.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require("cumulative" in ds.data_vars, "Aggregation contract: missing 'cumulative'")
    """
    if not condition:
        raise ContractViolation(message)
