"""GPX document parsing utilities."""

import xml.etree.ElementTree as ET

from .track_extractor import extract
from .track_models import Track


def parse_gpx_text(xml_data):
    """
    Parse raw GPX markup and extract its track segments.

    Args:
        xml_data: GPX document as str or bytes

    Returns:
        Track: extracted segments, or an invalid Track with `error` set when
        the markup is not well-formed
    """
    try:
        root = ET.fromstring(xml_data)
    except ET.ParseError as e:
        print(f"[WARN] GPX document could not be parsed: {e}")
        return Track(segments=[], is_valid=False, error=str(e) or 'Malformed GPX document')

    return extract(root)


def parse_gpx_file(filepath):
    """Read a GPX file from disk and extract its track segments."""
    with open(filepath, 'rb') as gpx_file:
        return parse_gpx_text(gpx_file.read())
