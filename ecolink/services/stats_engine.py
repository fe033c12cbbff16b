"""
Aggregate Statistics Engine - counts and derived percentages.

All functions are pure and deterministic. The caller chooses whether to pass
the raw collection or a filtered view. Empty collections produce zeros,
never NaN.
"""

import math
from typing import Dict, Sequence

from ecolink.models.organization import AvailabilityStatus, Organization
from ecolink.models.problem import DangerLevel, Problem, ProblemStatus
from ecolink.models.stats import OrganizationSummary, ProblemSummary


def round_half_up(value: float) -> int:
    """Round .5 upwards (2.5 -> 3), unlike Python's round() which rounds to even."""
    return int(math.floor(value + 0.5))


def total(collection: Sequence) -> int:
    return len(collection)


def count_by_status(problems: Sequence[Problem], status) -> int:
    wanted = ProblemStatus.parse(status)
    return sum(1 for p in problems if p.status == wanted)


def count_by_danger_level(problems: Sequence[Problem], level) -> int:
    wanted = DangerLevel.parse(level)
    return sum(1 for p in problems if p.danger_level == wanted)


def count_by_availability(orgs: Sequence[Organization], availability) -> int:
    wanted = AvailabilityStatus.parse(availability)
    return sum(1 for o in orgs if o.availability_status == wanted)


def resolution_rate(problems: Sequence[Problem]) -> int:
    """Percent of problems resolved, rounded. 0 for an empty collection."""
    count = total(problems)
    if count == 0:
        return 0
    return round_half_up(100 * count_by_status(problems, ProblemStatus.RESOLVED) / count)


def average_score(orgs: Sequence[Organization]) -> int:
    """Mean RSE score, rounded for display. 0 for an empty collection."""
    count = total(orgs)
    if count == 0:
        return 0
    return round_half_up(sum(o.rse_score for o in orgs) / count)


def service_count(orgs: Sequence[Organization]) -> int:
    return sum(len(o.services) for o in orgs)


def danger_distribution(problems: Sequence[Problem]) -> Dict[str, int]:
    distribution = {level.value: 0 for level in DangerLevel.known()}
    for p in problems:
        distribution[p.danger_level.value] = distribution.get(p.danger_level.value, 0) + 1
    return distribution


def problem_summary(problems: Sequence[Problem]) -> ProblemSummary:
    """Dashboard headline numbers."""
    return ProblemSummary(
        total=total(problems),
        pending=count_by_status(problems, ProblemStatus.PENDING),
        in_progress=count_by_status(problems, ProblemStatus.IN_PROGRESS),
        resolved=count_by_status(problems, ProblemStatus.RESOLVED),
        cancelled=count_by_status(problems, ProblemStatus.CANCELLED),
        resolution_rate=resolution_rate(problems),
        by_danger_level=danger_distribution(problems),
    )


def organization_summary(orgs: Sequence[Organization]) -> OrganizationSummary:
    """Directory header numbers: organizations, services, available, mean RSE score."""
    return OrganizationSummary(
        total=total(orgs),
        service_count=service_count(orgs),
        available_count=count_by_availability(orgs, AvailabilityStatus.DISPONIBLE),
        average_score=average_score(orgs),
    )
