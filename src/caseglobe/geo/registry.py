"""Deduplicate report locations and project them onto a sphere.

Locations are identified by their coordinates rounded to ``KEY_PRECISION``
decimal digits. Four digits is about 11 m of latitude, so two report sites
closer than that silently become one location. The precision is a
configuration value (``registry.key_precision``) so the merge distance stays
visible.

Each location gets a dense index in first-seen order and a fixed 3D position
on a sphere of radius ``R``::

    phi   = (90 - lat) * pi / 180
    theta = (lon + 180) * pi / 180
    x = -R * sin(phi) * cos(theta)
    y =  R * cos(phi)
    z =  R * sin(phi) * sin(theta)

Latitude 90 maps to the ``+y`` pole and longitude 0 sits on the seam behind
the viewer.
"""

import logging
from typing import TYPE_CHECKING, Iterator

import numpy as np
from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from caseglobe.schemas import InternalConfig

__all__ = [
    'KEY_PRECISION',
    'DEFAULT_SPHERE_RADIUS',
    'Location',
    'LocationRegistry',
    'location_key',
    'project_to_sphere',
]

logger = logging.getLogger(__name__)

KEY_PRECISION = 4
DEFAULT_SPHERE_RADIUS = 1.5


def location_key(lat: float, lon: float, precision: int = KEY_PRECISION) -> str:
    """Canonical key for a coordinate pair.

    Examples
    --------
    >>> location_key(30.97564, 112.2707)
    '30.9756,112.2707'
    """
    return f"{lat:.{precision}f},{lon:.{precision}f}"


def project_to_sphere(lat: float, lon: float, radius: float = DEFAULT_SPHERE_RADIUS) -> np.ndarray:
    """Project geographic coordinates (degrees) to a point on a sphere.

    Returns
    -------
    np.ndarray
        Array of shape (3,) holding ``(x, y, z)``.
    """
    phi = np.deg2rad(90.0 - lat)
    theta = np.deg2rad(lon + 180.0)
    return np.array([
        -radius * np.sin(phi) * np.cos(theta),
        radius * np.cos(phi),
        radius * np.sin(phi) * np.sin(theta),
    ])


class Location(BaseModel):
    """One registered location. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    index: int
    key: str
    latitude: float
    longitude: float
    country: str
    position: tuple[float, float, float]


class LocationRegistry:
    """Map coordinate keys to dense location indices.

    Indices start at 0 and follow first-registration order; they never
    change for the lifetime of the registry. Re-registering a key returns the
    existing index and leaves the stored country untouched (first-seen
    country wins).

    Examples
    --------
    >>> registry = LocationRegistry()
    >>> registry.register(31.0, 112.0, "China")
    0
    >>> registry.register(31.00001, 112.0, "Elsewhere")
    0
    >>> registry[0].country
    'China'
    """

    def __init__(self, precision: int = KEY_PRECISION, radius: float = DEFAULT_SPHERE_RADIUS):
        self.precision = precision
        self.radius = radius
        self._key_to_index: dict[str, int] = {}
        self._locations: list[Location] = []

    @classmethod
    def from_config(cls, config: "InternalConfig") -> "LocationRegistry":
        return cls(
            precision=config.registry.key_precision,
            radius=config.registry.sphere_radius,
        )

    def key_for(self, lat: float, lon: float) -> str:
        return location_key(lat, lon, self.precision)

    def register(self, lat: float, lon: float, country: str) -> int:
        """Register a coordinate pair and return its location index."""
        key = self.key_for(lat, lon)
        index = self._key_to_index.get(key)
        if index is not None:
            existing = self._locations[index]
            if country != existing.country:
                logger.debug(
                    "Location %s already registered as %r; ignoring %r",
                    key, existing.country, country,
                )
            return index

        index = len(self._locations)
        x, y, z = project_to_sphere(lat, lon, self.radius)
        self._locations.append(Location(
            index=index,
            key=key,
            latitude=lat,
            longitude=lon,
            country=country,
            position=(float(x), float(y), float(z)),
        ))
        self._key_to_index[key] = index
        return index

    def index_of(self, key: str) -> int:
        """Index for a location key. Raises KeyError for unknown keys."""
        return self._key_to_index[key]

    def __contains__(self, key: str) -> bool:
        return key in self._key_to_index

    def __len__(self) -> int:
        return len(self._locations)

    def __iter__(self) -> Iterator[Location]:
        return iter(self._locations)

    def __getitem__(self, index: int) -> Location:
        if not 0 <= index < len(self._locations):
            raise IndexError(f"Location index {index} out of range for {len(self._locations)} locations")
        return self._locations[index]

    @property
    def keys(self) -> list[str]:
        return [loc.key for loc in self._locations]

    @property
    def countries(self) -> list[str]:
        return [loc.country for loc in self._locations]

    def positions(self) -> np.ndarray:
        """All projected positions, shape (n_locations, 3)."""
        if not self._locations:
            return np.empty((0, 3))
        return np.array([loc.position for loc in self._locations])
