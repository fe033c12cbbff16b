"""Map routes - problem markers and map client configuration.

Markers are plain projections of the cached problems; problems that cannot
be placed (no coordinates, no "lat, lng" location) are left out.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ecolink.core.settings import settings
from ecolink.routes.dependencies import problems_cache
from ecolink.services.entity_cache import EntityCache
from ecolink.services.map_service import DEFAULT_CENTER, DEFAULT_ZOOM, MAP_STYLE, get_problem_markers


class ProblemMarker(BaseModel):
    id: str
    title: str
    latitude: float
    longitude: float
    danger_level: str
    danger_label: str
    color: str
    status: str
    status_label: str
    location: Optional[str] = ""
    created_at: Optional[str] = ""


router = APIRouter(prefix="/map", tags=["Map"])


@router.get("/problems", response_model=List[ProblemMarker])
async def map_problems(cache: EntityCache = Depends(problems_cache)):
    return get_problem_markers(cache.data)


@router.get("/config")
async def map_config():
    """
    Access credential and initial view for the client-side map.
    """
    return {
        "access_token": settings.MAP_PROVIDER_TOKEN or "",
        "style": MAP_STYLE,
        "center": DEFAULT_CENTER,
        "zoom": DEFAULT_ZOOM,
    }
