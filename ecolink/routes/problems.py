"""
Problem endpoints - the citizen-facing problems list and reporting form.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from ecolink.core.errors import EcoLinkError
from ecolink.models.filters import ProblemFilterState, ProblemSortKey
from ecolink.models.problem import Problem, ProblemCreate
from ecolink.models.stats import ProblemSummary
from ecolink.models.user import UserIdentity
from ecolink.routes.dependencies import get_current_identity, problems_cache
from ecolink.services.entity_cache import PROBLEMS, EntityCache, get_cache_registry
from ecolink.services.filter_engine import filter_problems
from ecolink.services.stats_engine import problem_summary
from ecolink.utils.labels import all_labels

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/problems", tags=["Problems"])


class ProblemListResponse(BaseModel):
    problems: List[Problem]
    count: int
    active_filters: int
    last_error: Optional[str] = None


@router.get("", response_model=ProblemListResponse)
async def list_problems(
    search: str = Query("", description="Matches title, description or location"),
    status_filter: str = Query("", alias="status", description="Problem status or 'all'"),
    danger_level: str = Query("", description="Danger level or 'all'"),
    sort_by: ProblemSortKey = Query(ProblemSortKey.RECENT),
    cache: EntityCache = Depends(problems_cache),
):
    """
    Filtered and sorted problems.

    A failed fetch still answers with whatever was cached (possibly nothing);
    `last_error` tells the client the list may be stale.
    """
    filters = ProblemFilterState(search=search, status=status_filter, danger_level=danger_level)
    problems = filter_problems(cache.data, filters, sort_by)
    return ProblemListResponse(
        problems=problems,
        count=len(problems),
        active_filters=filters.active_count(),
        last_error=cache.last_error,
    )


@router.post("", response_model=Problem, status_code=status.HTTP_201_CREATED)
async def report_problem(
    report: ProblemCreate,
    identity: Optional[UserIdentity] = Depends(get_current_identity),
):
    """
    Report a new problem.

    Requires a signed-in caller. The stored problem is returned as-is; the
    list is not refreshed here, clients refetch it.
    """
    try:
        logger.info(f"📝 POST /problems - danger_level={report.danger_level.value}")
        problem = get_cache_registry().create(PROBLEMS, report, identity)
        logger.info(f"✅ Problem reported: {problem.id}")
        return problem

    except (HTTPException, EcoLinkError):
        raise
    except Exception as e:
        logger.error(f"❌ POST /problems - Problem creation failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Problem creation failed: {str(e)}"
        )


@router.get("/stats", response_model=ProblemSummary)
async def problems_stats(cache: EntityCache = Depends(problems_cache)):
    return problem_summary(cache.data)


@router.get("/labels")
async def problem_labels():
    """French display labels; unknown values render as "Inconnu"."""
    return all_labels()
