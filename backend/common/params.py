"""
Query parameter parsing shared by the list endpoints.
"""
import math

from django.conf import settings

from .exceptions import ValidationError

GEOHASH_MIN_PRECISION = 1
GEOHASH_MAX_PRECISION = 12


def parse_radius(value, default=None):
    """
    Radius in kilometers. Missing means the configured default; anything
    that is not a positive finite number is rejected.
    """
    if value in (None, ''):
        return default if default is not None else settings.LOCATION_DEFAULT_RADIUS_KM

    try:
        radius = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Radius must be a number")

    if not math.isfinite(radius) or radius <= 0:
        raise ValidationError("Radius must be a positive number")
    return radius


def parse_limit(value, default):
    """Positive integer, capped at QUERY_MAX_LIMIT."""
    if value in (None, ''):
        return default

    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Limit must be an integer")

    if limit <= 0:
        raise ValidationError("Limit must be a positive integer")
    return min(limit, settings.QUERY_MAX_LIMIT)


def parse_precision(value):
    """Optional geohash precision (1-12); None when not requested."""
    if value in (None, ''):
        return None

    try:
        precision = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Precision must be an integer")

    if not GEOHASH_MIN_PRECISION <= precision <= GEOHASH_MAX_PRECISION:
        raise ValidationError(
            f"Precision must be between {GEOHASH_MIN_PRECISION} and {GEOHASH_MAX_PRECISION}"
        )
    return precision
