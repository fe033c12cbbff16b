"""
Organization endpoints - the RSE directory, registration and services.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from ecolink.core.errors import EcoLinkError
from ecolink.models.filters import OrganizationFilterState, OrganizationSortKey
from ecolink.models.organization import Organization, OrganizationCreate, OrganizationService, ServiceCreate
from ecolink.models.stats import OrganizationSummary
from ecolink.models.user import UserIdentity
from ecolink.routes.dependencies import get_current_identity, organizations_cache
from ecolink.services.entity_cache import ORGANIZATIONS, EntityCache, get_cache_registry
from ecolink.services.filter_engine import filter_organizations
from ecolink.services.organization_service import get_organization_service
from ecolink.services.stats_engine import organization_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizations", tags=["Organizations"])


class OrganizationListResponse(BaseModel):
    organizations: List[Organization]
    count: int
    active_filters: int
    last_error: Optional[str] = None


@router.get("", response_model=OrganizationListResponse)
async def list_organizations(
    search: str = Query("", description="Matches name, city or specialties"),
    org_type: str = Query("", alias="type", description="Organization type or 'all'"),
    category: str = Query("", description="Category or 'all'"),
    location: str = Query("", description="City or 'all'"),
    rating: float = Query(0, ge=0, le=5, description="Minimum rating"),
    availability: str = Query("", description="Availability status or 'all'"),
    certification: bool = Query(False, description="Certified organizations only"),
    rse_score: float = Query(0, ge=0, le=100, description="Minimum RSE score"),
    sort_by: OrganizationSortKey = Query(OrganizationSortKey.RATING),
    cache: EntityCache = Depends(organizations_cache),
):
    """
    Verified organizations matching every active filter, sorted.
    """
    filters = OrganizationFilterState(
        search=search,
        type=org_type,
        category=category,
        location=location,
        rating=rating,
        availability=availability,
        certification=certification,
        rse_score=rse_score,
    )
    organizations = filter_organizations(cache.data, filters, sort_by)
    return OrganizationListResponse(
        organizations=organizations,
        count=len(organizations),
        active_filters=filters.active_count(),
        last_error=cache.last_error,
    )


@router.post("", response_model=Organization, status_code=status.HTTP_201_CREATED)
async def register_organization(
    org: OrganizationCreate,
    identity: Optional[UserIdentity] = Depends(get_current_identity),
):
    """
    Register an organization. It stays out of the directory until verified.
    """
    try:
        organization = get_cache_registry().create(ORGANIZATIONS, org, identity)
        logger.info(f"✅ Organization registered: {organization.id}")
        return organization

    except (HTTPException, EcoLinkError):
        raise
    except Exception as e:
        logger.error(f"❌ POST /organizations - Registration failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Organization registration failed: {str(e)}"
        )


@router.post(
    "/{organization_id}/services",
    response_model=OrganizationService,
    status_code=status.HTTP_201_CREATED,
)
async def add_service(
    organization_id: str,
    service: ServiceCreate,
    identity: Optional[UserIdentity] = Depends(get_current_identity),
):
    try:
        return get_organization_service().create_service(organization_id, service, identity)
    except (HTTPException, EcoLinkError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to add service to {organization_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to add service: {str(e)}"
        )


@router.get("/stats", response_model=OrganizationSummary)
async def organizations_stats(cache: EntityCache = Depends(organizations_cache)):
    return organization_summary(cache.data)
