"""Build JSON-ready payloads for the 3D track viewer."""

import copy

from .coordinate_normalizer import NormalizerConfig, normalize_with_envelope

# Scene defaults for the track viewer.
TRACK_LINE_COLOR = '#fff836'
SCENE_DEFAULTS = {
    'line_color': TRACK_LINE_COLOR,
    'camera': {
        'fov': 75,
        'near': 0.1,
        'far': 100000,
        'position': [0, 0, 9],
    },
    'lights': [
        {'color': '#ffffff', 'intensity': 1, 'position': [0, 200, 0]},
        {'color': '#cccccc', 'intensity': 1, 'position': [100, 200, 100]},
        {'color': '#aaaaaa', 'intensity': 1, 'position': [-100, -200, -100]},
    ],
}


def _track_stats(track):
    timestamps = [wp.timestamp for _, wp in track.iter_waypoints() if wp.timestamp is not None]
    try:
        start_time = min(timestamps) if timestamps else None
        end_time = max(timestamps) if timestamps else None
    except TypeError:
        # Mixed naive and timezone-aware timestamps cannot be ordered.
        start_time, end_time = timestamps[0], timestamps[-1]

    return {
        'segment_count': len(track.segments),
        'point_count': track.point_count,
        'empty_segment_count': sum(1 for segment in track.segments if not segment),
        'has_elevation': any(wp.elevation is not None for _, wp in track.iter_waypoints()),
        'has_time': bool(timestamps),
        'start_time': start_time.isoformat() if start_time else None,
        'end_time': end_time.isoformat() if end_time else None,
    }


def build_track_payload(track, config=None, flatten=True):
    """
    Turn a Track into the structure consumed by the viewer.

    Args:
        track: Track from the extractor
        config: NormalizerConfig used for the projection
        flatten: If True, emit one continuous `points` list; otherwise emit
            `segments`, one point list per source segment

    Returns:
        dict: points, segment breaks, envelope, offsets, bounds, stats,
        config and scene defaults
    """
    config = config or NormalizerConfig()
    normalized, envelope, offsets = normalize_with_envelope(track, config)

    segment_breaks = []
    position = 0
    for segment in track.segments:
        segment_breaks.append(position)
        position += len(segment)

    payload = {
        'is_valid': track.is_valid,
        'error': track.error,
        'segment_breaks': segment_breaks,
        'envelope': envelope.to_dict() if envelope else None,
        'offsets': {'lat': offsets[0], 'lon': offsets[1]} if offsets else None,
        'bounds': envelope.to_bounds() if envelope else None,
        'stats': _track_stats(track),
        'config': config.to_dict(),
        'scene': copy.deepcopy(SCENE_DEFAULTS),
    }

    if flatten:
        payload['points'] = [point.as_list() for _, point in normalized]
    else:
        segments = [[] for _ in track.segments]
        for segment_index, point in normalized:
            segments[segment_index].append(point.as_list())
        payload['segments'] = segments

    return payload
