"""Date axis of the engine.

- date_index: Sorted distinct observation dates with dense indices
"""

from caseglobe.timeline.date_index import DateIndex

__all__ = ["DateIndex"]
