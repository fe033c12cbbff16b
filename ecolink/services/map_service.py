"""
Map service - project cached problems onto map markers for the frontend.

Map rendering and geocoding belong to the map provider; this module only
decides which problems can be placed and how they are coloured.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ecolink.models.problem import Problem
from ecolink.utils.geo import parse_coordinates
from ecolink.utils.labels import danger_color, danger_label, status_label
from ecolink.utils.timestamps import to_iso

logger = logging.getLogger(__name__)

# Map centre used by the client when no marker is available (Tunisia)
DEFAULT_CENTER = {"latitude": 33.8869, "longitude": 9.5375}
DEFAULT_ZOOM = 6
MAP_STYLE = "mapbox://styles/mapbox/streets-v12"


def problem_coordinates(problem: Problem) -> Optional[Tuple[float, float]]:
    """
    Explicit coordinates win; otherwise try a "lat, lng" location string.
    """
    if problem.location_lat is not None and problem.location_lng is not None:
        return problem.location_lat, problem.location_lng
    return parse_coordinates(problem.location)


def to_marker(problem: Problem) -> Optional[Dict[str, Any]]:
    coords = problem_coordinates(problem)
    if coords is None:
        return None

    lat, lng = coords
    return {
        "id": problem.id,
        "title": problem.title,
        "latitude": float(lat),
        "longitude": float(lng),
        "danger_level": problem.danger_level.value,
        "danger_label": danger_label(problem.danger_level),
        "color": danger_color(problem.danger_level),
        "status": problem.status.value,
        "status_label": status_label(problem.status),
        "location": problem.location,
        "created_at": to_iso(problem.created_at),
    }


def get_problem_markers(problems: Sequence[Problem]) -> List[Dict[str, Any]]:
    """
    Markers for every problem that can be placed on the map, input order kept.
    """
    markers = []
    for problem in problems:
        marker = to_marker(problem)
        if marker is not None:
            markers.append(marker)

    skipped = len(problems) - len(markers)
    if skipped:
        logger.info(f"{skipped} problem(s) without coordinates left off the map")
    return markers
