"""
Form validation - runs before any call to the Entity Store.

Every check raises core.errors.ValidationError with the offending field
names, so the frontend can show the message next to the right input.
"""

import re
from typing import Dict, List, Optional

from ecolink.core.errors import ValidationError
from ecolink.core.settings import settings
from ecolink.models.organization import OrganizationCreate
from ecolink.models.problem import ProblemCreate
from ecolink.models.user import SignInRequest, SignUpRequest

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Tunisian numbers: 8 digits, optional +216 / 216 prefix
PHONE_PATTERN = re.compile(r"^(\+216|216)?[0-9]{8}$")


def _missing(values: Dict[str, Optional[str]]) -> List[str]:
    return [name for name, value in values.items() if not value or not value.strip()]


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(re.sub(r"\s", "", phone or "")))


def validate_sign_up(form: SignUpRequest) -> None:
    """
    Validate the sign-up form.

    Order matches the form: required fields, email, password length,
    password confirmation, phone.
    """
    missing = _missing({
        "first_name": form.first_name,
        "last_name": form.last_name,
        "email": form.email,
        "password": form.password,
        "phone": form.phone,
        "governorate": form.governorate,
        "municipality": form.municipality,
    })
    if missing:
        raise ValidationError("Veuillez remplir tous les champs obligatoires", fields=missing)

    if not is_valid_email(form.email):
        raise ValidationError("Veuillez saisir un email valide", fields=["email"])

    if len(form.password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Le mot de passe doit contenir au moins {settings.PASSWORD_MIN_LENGTH} caractères",
            fields=["password"],
        )

    if form.password != form.confirm_password:
        raise ValidationError("Les mots de passe ne correspondent pas", fields=["confirm_password"])

    if not is_valid_phone(form.phone):
        raise ValidationError("Veuillez saisir un numéro tunisien valide", fields=["phone"])


def validate_sign_in(form: SignInRequest) -> None:
    missing = _missing({"email": form.email, "password": form.password})
    if missing:
        raise ValidationError("Email et mot de passe requis", fields=missing)
    if not is_valid_email(form.email):
        raise ValidationError("Veuillez saisir un email valide", fields=["email"])


def validate_problem_report(report: ProblemCreate) -> None:
    missing = _missing({
        "title": report.title,
        "description": report.description,
        "location": report.location,
    })
    if missing:
        raise ValidationError("Titre, description et localisation sont obligatoires", fields=missing)

    if (report.location_lat is None) != (report.location_lng is None):
        raise ValidationError(
            "Latitude et longitude doivent être fournies ensemble",
            fields=["location_lat", "location_lng"],
        )


def validate_organization(org: OrganizationCreate) -> None:
    missing = _missing({"name": org.name, "city": org.city, "region": org.region})
    if missing:
        raise ValidationError("Nom, ville et région sont obligatoires", fields=missing)

    if org.email and not is_valid_email(org.email):
        raise ValidationError("Veuillez saisir un email valide", fields=["email"])

    if org.phone and not is_valid_phone(org.phone):
        raise ValidationError("Veuillez saisir un numéro tunisien valide", fields=["phone"])
