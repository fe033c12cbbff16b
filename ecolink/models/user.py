"""
User models for authentication and identity.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UserType(str, Enum):
    CITOYEN = "citoyen"
    ASSOCIATION = "association"
    SOCIETE = "societe"


class SignUpRequest(BaseModel):
    """
    Sign-up form. Field checks (required, email/phone patterns, password
    length and confirmation) run in utils.validators before any store call.
    """
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    email: str = Field("", max_length=200)
    password: str = Field("", max_length=200)
    confirm_password: str = Field("", max_length=200)
    phone: str = Field("", max_length=30)
    governorate: str = Field("", max_length=100)
    municipality: str = Field("", max_length=100)
    user_type: UserType = UserType.CITOYEN


class SignInRequest(BaseModel):
    email: str = Field("", max_length=200)
    password: str = Field("", max_length=200)


class UserIdentity(BaseModel):
    """The authenticated caller. Only its presence is checked before create."""
    id: str = Field(..., description="Firestore document ID")
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    governorate: Optional[str] = None
    municipality: Optional[str] = None
    user_type: UserType = UserType.CITOYEN
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.first_name or self.email.split("@")[0] or "Utilisateur"


class AuthResponse(BaseModel):
    success: bool
    message: str
    user: Optional[UserIdentity] = None
    token: Optional[str] = None
