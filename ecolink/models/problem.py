"""
Pydantic models for reported environmental problems.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ecolink.models.base import TolerantEnum
from ecolink.utils.timestamps import parse_timestamp


class DangerLevel(TolerantEnum):
    """Severity of a reported problem."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"


class ProblemStatus(TolerantEnum):
    """
    Problem lifecycle. Problems are created as PENDING; every later
    transition happens in back-office workflow, never from this API.
    """
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class ProblemCreate(BaseModel):
    """
    Model for reporting a new problem (incoming POST request).
    Blank-field checks live in utils.validators so they produce the same
    ValidationError as the other forms.
    """
    title: str = Field("", max_length=200, description="Short title of the problem")
    description: str = Field("", max_length=2000, description="What the citizen observed")
    location: str = Field("", max_length=300, description="Free-text location or 'lat, lng'")
    location_lat: Optional[float] = Field(None, ge=-90, le=90, description="Latitude (optional)")
    location_lng: Optional[float] = Field(None, ge=-180, le=180, description="Longitude (optional)")
    danger_level: DangerLevel = Field(DangerLevel.LOW, description="low | medium | high")
    image_url: Optional[str] = Field(None, max_length=1000, description="URL of an already-uploaded photo")

    @field_validator("danger_level")
    @classmethod
    def reject_unknown_level(cls, value: DangerLevel) -> DangerLevel:
        if value == DangerLevel.UNKNOWN:
            raise ValueError("danger_level must be one of: low, medium, high")
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Décharge sauvage",
                "description": "Dépôt d'ordures au bord de l'oued depuis deux semaines.",
                "location": "36.8065, 10.1815",
                "danger_level": "medium",
            }
        }
        extra = "ignore"


class Problem(BaseModel):
    """A problem as stored in the Entity Store."""
    id: str = Field(..., description="Firestore document ID")
    title: str
    description: str = ""
    location: str = ""
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    danger_level: DangerLevel = DangerLevel.UNKNOWN
    status: ProblemStatus = ProblemStatus.UNKNOWN
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reporter_id: str
    assigned_org_id: Optional[str] = None

    @field_validator("description", "location", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("danger_level", mode="before")
    @classmethod
    def coerce_danger_level(cls, value):
        return DangerLevel.parse(value if value is not None else "unknown")

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, value):
        return ProblemStatus.parse(value if value is not None else "unknown")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, value):
        return parse_timestamp(value)
