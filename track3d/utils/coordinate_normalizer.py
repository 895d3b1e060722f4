"""Project track waypoints into centered, scaled 3D scene coordinates."""

import math
from dataclasses import dataclass

import numpy as np

from .app_config import (
    ELEVATION_MODE_FLAT,
    ELEVATION_MODE_SCALED,
    ELEVATION_MODES,
    get_default_elevation_divisor,
    get_default_elevation_mode,
    get_default_scale_factor,
    normalize_elevation_mode,
)
from .track_models import BoundingEnvelope, NormalizedPoint


@dataclass(frozen=True)
class NormalizerConfig:
    """
    Options for `normalize`.

    elevation_mode: 'flat' keeps every point at y=0, 'elevation_scaled'
        lifts points by (elevation - min elevation) / elevation_divisor
    elevation_divisor: divisor used by 'elevation_scaled'
    scale_factor: display zoom applied to all three axes
    """

    elevation_mode: str = ELEVATION_MODE_FLAT
    elevation_divisor: float = 5000.0
    scale_factor: float = 100.0

    def __post_init__(self):
        if self.elevation_mode not in ELEVATION_MODES:
            raise ValueError(
                f"Unknown elevation mode {self.elevation_mode!r}; "
                f"expected one of {sorted(ELEVATION_MODES)}"
            )
        for name in ('elevation_divisor', 'scale_factor'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number")
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite number")

    @classmethod
    def from_options(cls, options=None):
        """
        Build a config from a request options dict.

        Missing keys fall back to the environment defaults from app_config.
        Explicit values are validated and raise ValueError when unusable.
        """
        options = options or {}
        mode = options.get('elevation_mode')
        mode = get_default_elevation_mode() if mode is None else normalize_elevation_mode(mode)

        divisor = options.get('elevation_divisor')
        scale = options.get('scale_factor')
        return cls(
            elevation_mode=mode,
            elevation_divisor=get_default_elevation_divisor() if divisor is None else _to_number(divisor, 'elevation_divisor'),
            scale_factor=get_default_scale_factor() if scale is None else _to_number(scale, 'scale_factor'),
        )

    def to_dict(self):
        return {
            'elevation_mode': self.elevation_mode,
            'elevation_divisor': self.elevation_divisor,
            'scale_factor': self.scale_factor,
        }


def _to_number(value, name):
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number") from None


def _waypoint_arrays(track):
    segment_indices = []
    lats = []
    lons = []
    eles = []
    for segment_index, waypoint in track.iter_waypoints():
        segment_indices.append(segment_index)
        lats.append(waypoint.latitude)
        lons.append(waypoint.longitude)
        eles.append(waypoint.elevation_or_zero)
    return (
        segment_indices,
        np.array(lats, dtype=np.float64),
        np.array(lons, dtype=np.float64),
        np.array(eles, dtype=np.float64),
    )


def compute_envelope(track):
    """
    Bounding envelope over every waypoint of every segment.

    Waypoints without elevation take part in the elevation range as 0.0.
    Returns None for a track with no waypoints.
    """
    _, lats, lons, eles = _waypoint_arrays(track)
    if lats.size == 0:
        return None
    return _envelope_from_arrays(lats, lons, eles)


def _envelope_from_arrays(lats, lons, eles):
    return BoundingEnvelope(
        min_lat=float(lats.min()),
        max_lat=float(lats.max()),
        min_lon=float(lons.min()),
        max_lon=float(lons.max()),
        min_ele=float(eles.min()),
        max_ele=float(eles.max()),
    )


def compute_offsets(envelope):
    """Centering offsets (lat, lon) as max minus half the range."""
    offset_lat = envelope.max_lat - ((envelope.max_lat - envelope.min_lat) / 2)
    offset_lon = envelope.max_lon - ((envelope.max_lon - envelope.min_lon) / 2)
    return offset_lat, offset_lon


def _project(track, config):
    """Shared projection; returns (segment_indices, points, envelope, offsets)."""
    segment_indices, lats, lons, eles = _waypoint_arrays(track)
    if lats.size == 0:
        return [], [], None, None

    envelope = _envelope_from_arrays(lats, lons, eles)
    offset_lat, offset_lon = compute_offsets(envelope)

    # Three.js convention: Y is up, latitude on X, longitude on Z.
    xs = (lats - offset_lat) * config.scale_factor
    zs = (lons - offset_lon) * config.scale_factor
    if config.elevation_mode == ELEVATION_MODE_SCALED:
        ys = ((eles - envelope.min_ele) / config.elevation_divisor) * config.scale_factor
    else:
        ys = np.zeros_like(lats)

    points = [
        NormalizedPoint(x=float(x), y=float(y), z=float(z))
        for x, y, z in zip(xs, ys, zs)
    ]
    return segment_indices, points, envelope, (offset_lat, offset_lon)


def normalize(track, config=None):
    """
    Convert a track into normalized 3D points.

    Args:
        track: Track produced by the extractor
        config: NormalizerConfig, defaults to NormalizerConfig()

    Returns:
        list: (segment_index, NormalizedPoint) tuples in segment-then-point
        order; empty when the track has no waypoints
    """
    config = config or NormalizerConfig()
    segment_indices, points, _, _ = _project(track, config)
    return list(zip(segment_indices, points))


def normalize_segments(track, config=None):
    """Like `normalize` but grouped per segment; empty segments stay as []."""
    grouped = [[] for _ in track.segments]
    for segment_index, point in normalize(track, config):
        grouped[segment_index].append(point)
    return grouped


def normalize_with_envelope(track, config=None):
    """Return (points, envelope, offsets) in one pass for payload builders."""
    config = config or NormalizerConfig()
    segment_indices, points, envelope, offsets = _project(track, config)
    return list(zip(segment_indices, points)), envelope, offsets
