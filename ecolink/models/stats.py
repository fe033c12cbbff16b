"""
Headline numbers for the dashboard and the organization directory.
"""

from typing import Dict

from pydantic import BaseModel, Field


class ProblemSummary(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    cancelled: int = 0
    resolution_rate: int = Field(0, ge=0, le=100, description="Percent of problems resolved")
    by_danger_level: Dict[str, int] = Field(default_factory=dict)


class OrganizationSummary(BaseModel):
    total: int = 0
    service_count: int = 0
    available_count: int = 0
    average_score: int = Field(0, ge=0, le=100, description="Mean RSE score, rounded")
