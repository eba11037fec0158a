"""`caseglobe` - temporal aggregation of sparse per-location case reports.

Subpackages:
- ingest: CSV parsing into case samples
- geo: Location registry and sphere projection
- timeline: Date index
- aggregation: Cumulative and daily matrices
- query: Per-date values and country rankings
- pipeline: Engine facade and playback controller
"""

__version__ = "0.1.0"
