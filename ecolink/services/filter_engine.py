"""
Filter/Sort Engine - derive ordered views of problems and organizations.

Pure functions over in-memory collections, re-run on every request:
- every active predicate must pass (logical AND across dimensions)
- an inactive predicate ("" / "all" / 0 / False) never excludes anything
- an active categorical predicate excludes entities whose field is UNKNOWN
- sorting uses Python's stable sort, so equal keys keep input order and
  sorting twice gives the same result as sorting once
"""

from typing import Callable, Iterable, List, Optional, Sequence

from ecolink.models.base import TolerantEnum
from ecolink.models.filters import (
    OrganizationFilterState,
    OrganizationSortKey,
    ProblemFilterState,
    ProblemSortKey,
    is_active_choice,
)
from ecolink.models.organization import Organization
from ecolink.models.problem import DangerLevel, Problem

DANGER_RANK = {
    DangerLevel.HIGH: 3,
    DangerLevel.MEDIUM: 2,
    DangerLevel.LOW: 1,
    DangerLevel.UNKNOWN: 0,
}


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def matches_search(query: str, fields: Iterable[Optional[str]]) -> bool:
    """Case-insensitive substring match against ANY of the given fields."""
    needle = (query or "").strip().casefold()
    if not needle:
        return True
    return any(needle in value.casefold() for value in fields if value)


def matches_choice(selected: str, value: TolerantEnum) -> bool:
    """Exact, case-insensitive enum match. UNKNOWN never satisfies an active filter."""
    if not is_active_choice(selected):
        return True
    if value.value == "unknown":
        return False
    return value.value == selected.strip().lower()


def matches_text_choice(selected: str, value: Optional[str]) -> bool:
    """Exact, case-insensitive match on a free-text field such as city."""
    if not is_active_choice(selected):
        return True
    if not value:
        return False
    return value.strip().casefold() == selected.strip().casefold()


def organization_predicates(filters: OrganizationFilterState) -> List[Callable[[Organization], bool]]:
    return [
        lambda org: matches_search(filters.search, [org.name, org.city, *org.specialties]),
        lambda org: matches_choice(filters.type, org.type),
        lambda org: matches_choice(filters.category, org.category),
        lambda org: matches_text_choice(filters.location, org.city),
        lambda org: org.rating >= filters.rating,
        lambda org: matches_choice(filters.availability, org.availability_status),
        lambda org: not filters.certification or len(org.certifications) > 0,
        lambda org: org.rse_score >= filters.rse_score,
    ]


def problem_predicates(filters: ProblemFilterState) -> List[Callable[[Problem], bool]]:
    return [
        lambda p: matches_search(filters.search, [p.title, p.description, p.location]),
        lambda p: matches_choice(filters.status, p.status),
        lambda p: matches_choice(filters.danger_level, p.danger_level),
    ]


def _apply(collection: Sequence, predicates: List[Callable]) -> list:
    return [item for item in collection if all(check(item) for check in predicates)]


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

def _by_timestamp(problems: Sequence[Problem], newest_first: bool) -> List[Problem]:
    # Undated problems always go last, in input order
    dated = [p for p in problems if p.created_at is not None]
    undated = [p for p in problems if p.created_at is None]
    return sorted(dated, key=lambda p: p.created_at, reverse=newest_first) + undated


def sort_organizations(orgs: Sequence[Organization],
                       sort_by: OrganizationSortKey = OrganizationSortKey.RATING) -> List[Organization]:
    sort_by = OrganizationSortKey(sort_by)
    if sort_by == OrganizationSortKey.RATING:
        return sorted(orgs, key=lambda o: o.rating, reverse=True)
    if sort_by == OrganizationSortKey.RSE_SCORE:
        return sorted(orgs, key=lambda o: o.rse_score, reverse=True)
    return sorted(orgs, key=lambda o: o.city.casefold())


def sort_problems(problems: Sequence[Problem],
                  sort_by: ProblemSortKey = ProblemSortKey.RECENT) -> List[Problem]:
    sort_by = ProblemSortKey(sort_by)
    if sort_by == ProblemSortKey.RECENT:
        return _by_timestamp(problems, newest_first=True)
    if sort_by == ProblemSortKey.OLDEST:
        return _by_timestamp(problems, newest_first=False)
    if sort_by == ProblemSortKey.DANGER_HIGH:
        return sorted(problems, key=lambda p: DANGER_RANK[p.danger_level], reverse=True)
    if sort_by == ProblemSortKey.DANGER_LOW:
        return sorted(problems, key=lambda p: DANGER_RANK[p.danger_level])
    return sorted(problems, key=lambda p: p.location.casefold())


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def filter_organizations(orgs: Sequence[Organization],
                         filters: Optional[OrganizationFilterState] = None,
                         sort_by: OrganizationSortKey = OrganizationSortKey.RATING) -> List[Organization]:
    """
    Directory view: organizations passing every active filter, sorted.

    Args:
        orgs: Cached organization collection (already restricted to verified)
        filters: Filter state; None means all filters inactive
        sort_by: rating (desc), rse_score (desc) or distance (city asc)

    Returns:
        New list; the input collection is never modified
    """
    filters = filters or OrganizationFilterState()
    return sort_organizations(_apply(orgs, organization_predicates(filters)), sort_by)


def filter_problems(problems: Sequence[Problem],
                    filters: Optional[ProblemFilterState] = None,
                    sort_by: ProblemSortKey = ProblemSortKey.RECENT) -> List[Problem]:
    """Problems list/map view: problems passing every active filter, sorted."""
    filters = filters or ProblemFilterState()
    return sort_problems(_apply(problems, problem_predicates(filters)), sort_by)

