"""
Pydantic models for the RSE organization directory.

An Organization owns zero or more Services (separate `organization_services`
collection keyed by organization_id). Only verified organizations are
listed publicly; verification is toggled outside this API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ecolink.models.base import TolerantEnum
from ecolink.utils.timestamps import parse_timestamp


class OrganizationType(TolerantEnum):
    ENTREPRISE = "entreprise"
    ASSOCIATION = "association"
    ONG = "ong"
    GOUVERNEMENTAL = "gouvernemental"
    UNKNOWN = "unknown"


class OrganizationCategory(TolerantEnum):
    """RSE domain the organization works in."""
    ENVIRONNEMENT = "environnement"
    SOCIAL = "social"
    ECONOMIQUE = "economique"
    GOUVERNANCE = "gouvernance"
    UNKNOWN = "unknown"


class AvailabilityStatus(TolerantEnum):
    DISPONIBLE = "disponible"
    OCCUPE = "occupé"
    EN_PAUSE = "en_pause"
    UNKNOWN = "unknown"


class ImpactLevel(TolerantEnum):
    FAIBLE = "faible"
    MOYEN = "moyen"
    FORT = "fort"
    UNKNOWN = "unknown"


def _reject_unknown(value):
    if value is not None and value.value == "unknown":
        raise ValueError(f"must be one of: {', '.join(m.value for m in type(value).known())}")
    return value


class ServiceCreate(BaseModel):
    """Model for adding a service to an organization."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    price: str = Field(..., min_length=1, max_length=100, description="Display string, e.g. '1500 TND' or 'Gratuit'")
    duration: Optional[str] = Field(None, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    impact_level: Optional[ImpactLevel] = None

    @field_validator("impact_level")
    @classmethod
    def reject_unknown(cls, value):
        return _reject_unknown(value)


class OrganizationService(BaseModel):
    """A service offered by an organization. Price is opaque display text."""
    id: str
    organization_id: str = ""
    name: str
    description: Optional[str] = None
    price: str = ""
    duration: Optional[str] = None
    category: str = ""
    impact_level: Optional[ImpactLevel] = None

    @field_validator("impact_level", mode="before")
    @classmethod
    def coerce_impact(cls, value):
        if value is None or value == "":
            return None
        return ImpactLevel.parse(value)

    @field_validator("price", "category", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value


class OrganizationCreate(BaseModel):
    """
    Model for registering an organization.
    rating, rse_score and verified are set by the system, never by the caller.
    """
    name: str = Field("", max_length=200)
    type: OrganizationType = OrganizationType.ASSOCIATION
    category: OrganizationCategory = OrganizationCategory.ENVIRONNEMENT
    description: Optional[str] = Field(None, max_length=2000)
    city: str = Field("", max_length=100)
    region: str = Field("", max_length=100)
    address: Optional[str] = Field(None, max_length=300)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=200)
    website: Optional[str] = Field(None, max_length=300)
    logo_url: Optional[str] = Field(None, max_length=1000)
    certifications: List[str] = Field(default_factory=list)
    specialties: List[str] = Field(default_factory=list)
    availability_status: AvailabilityStatus = AvailabilityStatus.DISPONIBLE
    next_available_date: Optional[str] = None
    years_active: int = Field(0, ge=0)
    team_size: int = Field(0, ge=0)
    projects_completed: int = Field(0, ge=0)
    clients_satisfied: int = Field(0, ge=0)

    @field_validator("type", "category", "availability_status")
    @classmethod
    def reject_unknown(cls, value):
        return _reject_unknown(value)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "EcoSolutions Tunisie",
                "type": "entreprise",
                "category": "environnement",
                "city": "Tunis",
                "region": "Tunis",
                "email": "contact@ecosolutions.tn",
                "specialties": ["Gestion des déchets", "Audit énergétique"],
                "certifications": ["ISO 14001"],
            }
        }
        extra = "ignore"


class Organization(BaseModel):
    """An organization as stored in the Entity Store (flattened shape)."""
    id: str = Field(..., description="Firestore document ID")
    name: str
    type: OrganizationType = OrganizationType.UNKNOWN
    category: OrganizationCategory = OrganizationCategory.UNKNOWN
    description: Optional[str] = None
    city: str = ""
    region: str = ""
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    rating: float = Field(0, ge=0, le=5)
    rse_score: float = Field(0, ge=0, le=100)
    certifications: List[str] = Field(default_factory=list)
    specialties: List[str] = Field(default_factory=list)
    availability_status: AvailabilityStatus = AvailabilityStatus.UNKNOWN
    next_available_date: Optional[str] = None
    years_active: int = Field(0, ge=0)
    team_size: int = Field(0, ge=0)
    projects_completed: int = Field(0, ge=0)
    clients_satisfied: int = Field(0, ge=0)
    verified: bool = False
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    services: List[OrganizationService] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value):
        return OrganizationType.parse(value if value is not None else "unknown")

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value):
        return OrganizationCategory.parse(value if value is not None else "unknown")

    @field_validator("availability_status", mode="before")
    @classmethod
    def coerce_availability(cls, value):
        return AvailabilityStatus.parse(value if value is not None else "unknown")

    @field_validator("city", "region", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("certifications", "specialties", mode="before")
    @classmethod
    def none_to_list(cls, value):
        return [] if value is None else value

    @field_validator("rating", "rse_score", "years_active", "team_size",
                     "projects_completed", "clients_satisfied", mode="before")
    @classmethod
    def none_to_zero(cls, value):
        return 0 if value is None else value

    @field_validator("created_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, value):
        return parse_timestamp(value)
