"""Temporal aggregation.

- aggregator: Sparse reports to dense cumulative and daily matrices
"""

from caseglobe.aggregation.aggregator import TemporalAggregator, build_raw_matrix, carry_forward

__all__ = ["TemporalAggregator", "build_raw_matrix", "carry_forward"]
