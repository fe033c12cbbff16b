"""
Coordinate helpers. Geocoding itself is delegated to the map provider.
"""

import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def parse_coordinates(location: Optional[str]) -> Optional[Tuple[float, float]]:
    """
    Read a "lat, lng" location string (what the browser geolocation button
    writes into the location field).

    Returns:
        (latitude, longitude) or None when the text is a place name or the
        numbers are out of range
    """
    if not location or "," not in location:
        return None

    parts = [p.strip() for p in location.split(",")]
    if len(parts) != 2:
        return None

    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        return None

    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        logger.warning(f"Coordinates out of range in location: {location}")
        return None
    return lat, lng
