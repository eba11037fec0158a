"""Location handling.

- registry: Coordinate-key deduplication, dense indices, sphere projection
"""

from caseglobe.geo.registry import (
    KEY_PRECISION,
    DEFAULT_SPHERE_RADIUS,
    Location,
    LocationRegistry,
    location_key,
    project_to_sphere,
)

__all__ = [
    "KEY_PRECISION",
    "DEFAULT_SPHERE_RADIUS",
    "Location",
    "LocationRegistry",
    "location_key",
    "project_to_sphere",
]
