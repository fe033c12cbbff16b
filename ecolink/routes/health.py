"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from ecolink.config.firebase import get_db
from ecolink.core.settings import settings

# Collections the app reads from; missing ones just mean nothing was stored yet
EXPECTED_COLLECTIONS = ["problems", "organizations", "organization_services", "users"]

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Liveness probe. Returns 200 if the process is serving requests.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "mock_db": settings.USE_MOCK_DB,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/db")
async def database_health():
    """
    Entity Store connectivity check.

    Lists collections (needs a working client, no data) and reports which of
    the collections EcoLink reads are still empty.
    """
    try:
        names = sorted(c.id for c in get_db().collections())
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )

    return {
        "status": "healthy",
        "database": "mock" if settings.USE_MOCK_DB else "firestore",
        "connected": True,
        "collections": names,
        "empty_collections": [name for name in EXPECTED_COLLECTIONS if name not in names],
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
