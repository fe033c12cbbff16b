"""
Dashboard endpoint - headline numbers and the most recent problems.
"""

from fastapi import APIRouter, Depends, Query

from ecolink.models.filters import ProblemSortKey
from ecolink.routes.dependencies import organizations_cache, problems_cache
from ecolink.services.entity_cache import EntityCache
from ecolink.services.filter_engine import sort_problems
from ecolink.services.stats_engine import organization_summary, problem_summary

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("")
async def dashboard(
    limit: int = Query(10, ge=1, le=50, description="Number of recent problems"),
    problems: EntityCache = Depends(problems_cache),
    organizations: EntityCache = Depends(organizations_cache),
):
    recent = sort_problems(problems.data, ProblemSortKey.RECENT)[:limit]
    return {
        "problems": problem_summary(problems.data),
        "organizations": organization_summary(organizations.data),
        "recent_problems": recent,
    }
