"""Extract track segments and waypoints from a parsed GPX document tree."""

import enum
import math

import gpxpy.gpx
import gpxpy.gpxfield

from .track_models import Track, Waypoint

TRACK_SEGMENT_TAG = 'trkseg'
TRACK_POINT_TAG = 'trkpt'
ELEVATION_TAG = 'ele'
TIME_TAG = 'time'


class NodeKind(enum.Enum):
    TRACK_SEGMENT = 'track_segment'
    OTHER = 'other'


def local_name(tag):
    """
    Strip namespace and prefix from an element tag.

    ElementTree reports namespaced tags as `{uri}name`; documents written
    without namespace handling may still carry a `prefix:name` form.
    Comments and processing instructions have non-string tags and map to ''.
    """
    if not isinstance(tag, str):
        return ''
    if tag.startswith('{'):
        tag = tag.rsplit('}', 1)[-1]
    return tag.rsplit(':', 1)[-1]


def classify_node(node):
    if local_name(node.tag) == TRACK_SEGMENT_TAG:
        return NodeKind.TRACK_SEGMENT
    return NodeKind.OTHER


def parse_float(value):
    """Parse a finite float, returning None for missing or invalid input."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_timestamp(value):
    """Parse a GPX timestamp, returning None when it cannot be read."""
    if not value or not value.strip():
        return None
    try:
        return gpxpy.gpxfield.parse_time(value.strip())
    except (gpxpy.gpx.GPXException, ValueError):
        return None


def _node_text(node):
    return node.text.strip() if node.text else None


def read_waypoint(node):
    """
    Build a Waypoint from a `trkpt` element.

    Returns None when latitude or longitude is missing or not a number.
    Unreadable elevation or time values leave the field empty.
    """
    latitude = parse_float(node.attrib.get('lat'))
    longitude = parse_float(node.attrib.get('lon'))
    if latitude is None or longitude is None:
        return None

    elevation = None
    timestamp = None
    for child in node:
        name = local_name(child.tag)
        if name == ELEVATION_TAG:
            elevation = parse_float(_node_text(child))
        elif name == TIME_TAG:
            timestamp = parse_timestamp(_node_text(child))

    return Waypoint(
        latitude=latitude,
        longitude=longitude,
        elevation=elevation,
        timestamp=timestamp,
    )


def read_segment(node):
    """Collect the valid track points among a `trkseg` element's direct children."""
    segment = []
    for child in node:
        if local_name(child.tag) != TRACK_POINT_TAG:
            continue
        waypoint = read_waypoint(child)
        if waypoint is not None:
            segment.append(waypoint)
    return segment


def extract(document_root):
    """
    Walk a document tree depth-first and collect its track segments.

    Every node is visited in pre-order, whatever its depth. Each `trkseg`
    opens a new segment as soon as it is reached, so segment order follows
    document order even for segments that end up empty. The walk then
    continues into the segment's own descendants.

    Args:
        document_root: Root `xml.etree.ElementTree.Element` of a parsed GPX file

    Returns:
        Track: segments found in the tree; never carries an error
    """
    track = Track()
    stack = [document_root]
    while stack:
        node = stack.pop()
        if classify_node(node) is NodeKind.TRACK_SEGMENT:
            track.segments.append(read_segment(node))
        # Reverse so children are visited in document order.
        stack.extend(reversed(list(node)))

    track.is_valid = track.point_count > 0
    return track
