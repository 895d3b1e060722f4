"""Value types shared by the track extractor and the coordinate normalizer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class Waypoint:
    """A single recorded GPS sample. Only built when lat/lon are valid."""

    latitude: float
    longitude: float
    elevation: Optional[float] = None
    timestamp: Optional[datetime] = None

    @property
    def elevation_or_zero(self):
        """Elevation used by the normalizer; missing elevation counts as 0.0."""
        return self.elevation if self.elevation is not None else 0.0


@dataclass
class Track:
    """
    Result of reading a GPX document.

    `segments` is a list of lists of Waypoint in document order. Empty
    segments are kept. `error` is only set when the raw document could not
    be parsed at all.
    """

    segments: List[List[Waypoint]] = field(default_factory=list)
    is_valid: bool = False
    error: str = ''

    @property
    def point_count(self):
        return sum(len(segment) for segment in self.segments)

    def iter_waypoints(self):
        """Yield (segment_index, waypoint) in segment-then-point order."""
        for index, segment in enumerate(self.segments):
            for waypoint in segment:
                yield index, waypoint


@dataclass(frozen=True)
class BoundingEnvelope:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float
    min_ele: float
    max_ele: float

    def to_bounds(self):
        """Bounds in north/south/east/west form."""
        return {
            'north': self.max_lat,
            'south': self.min_lat,
            'east': self.max_lon,
            'west': self.min_lon,
        }

    def to_dict(self):
        return {
            'min_lat': self.min_lat,
            'max_lat': self.max_lat,
            'min_lon': self.min_lon,
            'max_lon': self.max_lon,
            'min_ele': self.min_ele,
            'max_ele': self.max_ele,
        }


@dataclass(frozen=True)
class NormalizedPoint:
    x: float
    y: float
    z: float

    def as_list(self):
        return [self.x, self.y, self.z]
