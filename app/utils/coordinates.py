"""
Coordinate encoding between the store's wire string and in-memory pairs.

The backing store keeps a monitoring point's location as a single
``"<longitude>,<latitude>"`` string. In memory the location is always a
``(longitude, latitude)`` tuple of floats.
"""
import math
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

Coordinates = Tuple[float, float]

# Substituted whenever a stored coordinate string cannot be decoded
FALLBACK_COORDINATES: Coordinates = (-74.006, 40.7128)

LONGITUDE_RANGE = (-180.0, 180.0)
LATITUDE_RANGE = (-90.0, 90.0)


class MalformedCoordinateString(ValueError):
    """Raised when a wire coordinate string cannot be decoded."""
    pass


def validate_coordinates(longitude: float, latitude: float) -> Coordinates:
    """
    Check that a longitude/latitude pair is finite and in range.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees

    Returns:
        The pair as a (longitude, latitude) tuple of floats

    Raises:
        ValueError: If either value is non-finite or out of range
    """
    lon, lat = float(longitude), float(latitude)
    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise ValueError(f"Coordinates must be finite, got ({lon}, {lat})")
    if not LONGITUDE_RANGE[0] <= lon <= LONGITUDE_RANGE[1]:
        raise ValueError(f"Longitude {lon} outside {LONGITUDE_RANGE}")
    if not LATITUDE_RANGE[0] <= lat <= LATITUDE_RANGE[1]:
        raise ValueError(f"Latitude {lat} outside {LATITUDE_RANGE}")
    return lon, lat


def encode_coordinates(coordinates: Coordinates) -> str:
    """
    Encode a (longitude, latitude) pair to the store's wire format.

    Args:
        coordinates: (longitude, latitude) tuple in degrees

    Returns:
        String of the form "<lon>,<lat>"
    """
    lon, lat = coordinates
    return f"{float(lon)},{float(lat)}"


def decode_coordinates(value: Optional[str]) -> Coordinates:
    """
    Strictly decode a wire coordinate string.

    Args:
        value: String of the form "<lon>,<lat>"

    Returns:
        (longitude, latitude) tuple

    Raises:
        MalformedCoordinateString: If the string is empty, not two
            comma-separated numbers, or out of range
    """
    if not value:
        raise MalformedCoordinateString("Empty coordinate string")

    parts = value.split(",")
    if len(parts) != 2:
        raise MalformedCoordinateString(
            f"Expected '<lon>,<lat>', got {value!r}"
        )

    try:
        return validate_coordinates(float(parts[0]), float(parts[1]))
    except ValueError as e:
        raise MalformedCoordinateString(str(e)) from e


def parse_coordinates(value: Optional[str]) -> Coordinates:
    """
    Decode a wire coordinate string, never failing the caller.

    Args:
        value: String of the form "<lon>,<lat>", possibly empty or None

    Returns:
        Decoded pair, or FALLBACK_COORDINATES if the string is malformed
    """
    try:
        return decode_coordinates(value)
    except MalformedCoordinateString as e:
        logger.debug(f"Using fallback coordinates: {e}")
        return FALLBACK_COORDINATES
