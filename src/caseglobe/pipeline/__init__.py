"""Pipeline modules.

- engine: CaseEngine facade owning all derived state
- playback: Timer-driven date playback
"""

from caseglobe.pipeline.engine import CaseEngine
from caseglobe.pipeline.playback import PlaybackController, PlaybackState

__all__ = [
    "CaseEngine",
    "PlaybackController",
    "PlaybackState",
]
