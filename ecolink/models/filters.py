"""
Filter and sort configuration for the problems list and the organization
directory. These are transient, per-request records: every field defaults to
an inactive value, and an inactive filter never excludes anything.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Select widgets send "all" for "no restriction"
ALL = "all"


def is_active_choice(value: str) -> bool:
    """True when a categorical filter value actually restricts results."""
    return bool(value and value.strip()) and value.strip().lower() != ALL


class OrganizationSortKey(str, Enum):
    RATING = "rating"
    RSE_SCORE = "rse_score"
    DISTANCE = "distance"  # approximated by city name, ascending


class ProblemSortKey(str, Enum):
    RECENT = "recent"
    OLDEST = "oldest"
    DANGER_HIGH = "danger-high"
    DANGER_LOW = "danger-low"
    LOCATION = "location"


class OrganizationFilterState(BaseModel):
    """Directory filters (search box, selects, advanced filters)."""
    model_config = ConfigDict(populate_by_name=True)

    search: str = ""
    type: str = ""
    category: str = ""
    location: str = ""
    rating: float = Field(0, ge=0, le=5, description="Minimum rating")
    availability: str = ""
    certification: bool = Field(False, description="Certified organizations only")
    rse_score: float = Field(0, ge=0, le=100, alias="rseScore", description="Minimum RSE score")

    @classmethod
    def defaults(cls) -> "OrganizationFilterState":
        return cls()

    def reset(self) -> "OrganizationFilterState":
        return self.defaults()

    def active_count(self) -> int:
        checks = [
            bool(self.search.strip()),
            is_active_choice(self.type),
            is_active_choice(self.category),
            is_active_choice(self.location),
            self.rating > 0,
            is_active_choice(self.availability),
            self.certification,
            self.rse_score > 0,
        ]
        return sum(1 for active in checks if active)


class ProblemFilterState(BaseModel):
    """Problems list filters."""
    search: str = ""
    status: str = ""
    danger_level: str = ""

    @classmethod
    def defaults(cls) -> "ProblemFilterState":
        return cls()

    def reset(self) -> "ProblemFilterState":
        return self.defaults()

    def active_count(self) -> int:
        checks = [
            bool(self.search.strip()),
            is_active_choice(self.status),
            is_active_choice(self.danger_level),
        ]
        return sum(1 for active in checks if active)
