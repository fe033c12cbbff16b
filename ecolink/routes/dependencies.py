"""
Shared FastAPI dependencies: the current identity and the shared entity caches.
"""

from typing import AsyncIterator, Optional

from fastapi import Header

from ecolink.models.user import UserIdentity
from ecolink.services.auth_service import get_auth_service
from ecolink.services.entity_cache import ORGANIZATIONS, PROBLEMS, EntityCache, get_cache_registry


async def get_current_identity(
    session_token: Optional[str] = Header(None, alias="X-Session-Token", description="Session token from sign-in")
) -> Optional[UserIdentity]:
    """None for anonymous callers; create routes decide what that means."""
    if not session_token:
        return None
    return get_auth_service().get_identity(session_token)


async def problems_cache() -> AsyncIterator[EntityCache]:
    registry = get_cache_registry()
    cache = registry.subscribe(PROBLEMS)
    try:
        yield cache
    finally:
        registry.release(PROBLEMS)


async def organizations_cache() -> AsyncIterator[EntityCache]:
    registry = get_cache_registry()
    cache = registry.subscribe(ORGANIZATIONS)
    try:
        yield cache
    finally:
        registry.release(ORGANIZATIONS)
