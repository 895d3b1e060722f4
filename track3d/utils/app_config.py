"""Application configuration helpers."""

import math
import os


ELEVATION_MODE_FLAT = 'flat'
ELEVATION_MODE_SCALED = 'elevation_scaled'
ELEVATION_MODES = {ELEVATION_MODE_FLAT, ELEVATION_MODE_SCALED}

DEFAULT_ELEVATION_MODE = ELEVATION_MODE_FLAT
DEFAULT_ELEVATION_DIVISOR = 5000.0
DEFAULT_SCALE_FACTOR = 100.0
DEFAULT_MAX_UPLOAD_MB = 16


def parse_env_bool(value, default=False):
    """Parse a boolean-like environment value with a fallback default."""
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def get_cors_origins():
    """
    Return CORS origins from env, or localhost-only defaults.

    `TRACK3D_CORS_ORIGINS` supports a comma-separated list.
    """
    raw = os.getenv('TRACK3D_CORS_ORIGINS', '')
    if raw.strip():
        return [origin.strip() for origin in raw.split(',') if origin.strip()]
    return [r"^http://localhost(:\d+)?$", r"^http://127\.0\.0\.1(:\d+)?$"]


def parse_env_int(name, default):
    """Parse an integer environment value with fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def parse_env_float(name, default):
    """Parse a finite float environment value with fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return value


def normalize_elevation_mode(mode):
    """Lower-case a mode name and accept the camelCase spelling of the scaled mode."""
    normalized = str(mode).strip().lower().replace('-', '_')
    if normalized == 'elevationscaled':
        return ELEVATION_MODE_SCALED
    return normalized


def get_default_elevation_mode():
    mode = normalize_elevation_mode(os.getenv("TRACK3D_ELEVATION_MODE", DEFAULT_ELEVATION_MODE))
    if mode in ELEVATION_MODES:
        return mode
    return DEFAULT_ELEVATION_MODE


def get_default_elevation_divisor():
    divisor = parse_env_float("TRACK3D_ELEVATION_DIVISOR", DEFAULT_ELEVATION_DIVISOR)
    if divisor <= 0:
        return DEFAULT_ELEVATION_DIVISOR
    return divisor


def get_default_scale_factor():
    scale = parse_env_float("TRACK3D_SCALE_FACTOR", DEFAULT_SCALE_FACTOR)
    if scale <= 0:
        return DEFAULT_SCALE_FACTOR
    return scale


def get_max_upload_bytes():
    return max(1, parse_env_int("TRACK3D_MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB)) * 1024 * 1024
