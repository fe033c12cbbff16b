import pytest
from pydantic import ValidationError as PydanticValidationError

from ecolink.core.errors import ValidationError
from ecolink.models.organization import OrganizationCreate
from ecolink.models.problem import ProblemCreate
from ecolink.models.user import SignInRequest, SignUpRequest
from ecolink.utils.validators import (
    is_valid_email,
    is_valid_phone,
    validate_organization,
    validate_problem_report,
    validate_sign_in,
    validate_sign_up,
)


@pytest.mark.parametrize("email,expected", [
    ("amira@example.tn", True),
    ("a@b.c", True),
    ("amira@example", False),
    ("amira example@x.tn", False),
    ("", False),
])
def test_email_pattern(email, expected):
    assert is_valid_email(email) is expected


@pytest.mark.parametrize("phone,expected", [
    ("22123456", True),
    ("+21622123456", True),
    ("216 22 123 456", True),
    ("2212345", False),
    ("+33612345678", False),
])
def test_phone_pattern(phone, expected):
    assert is_valid_phone(phone) is expected


def test_sign_up_reports_missing_fields(sign_up_payload):
    form = SignUpRequest(**sign_up_payload(first_name="", municipality="  "))
    with pytest.raises(ValidationError) as exc_info:
        validate_sign_up(form)
    assert exc_info.value.fields == ["first_name", "municipality"]


def test_sign_up_password_rules(sign_up_payload):
    with pytest.raises(ValidationError) as exc_info:
        validate_sign_up(SignUpRequest(**sign_up_payload(password="abc", confirm_password="abc")))
    assert exc_info.value.fields == ["password"]

    with pytest.raises(ValidationError) as exc_info:
        validate_sign_up(SignUpRequest(**sign_up_payload(confirm_password="other123")))
    assert exc_info.value.fields == ["confirm_password"]


def test_sign_up_valid_form_passes(sign_up_payload):
    validate_sign_up(SignUpRequest(**sign_up_payload()))


def test_sign_in_requires_both_fields():
    with pytest.raises(ValidationError):
        validate_sign_in(SignInRequest(email="amira@example.tn"))


def test_problem_report_requires_text_fields():
    with pytest.raises(ValidationError) as exc_info:
        validate_problem_report(ProblemCreate(title="Fuite", description=" ", location=""))
    assert exc_info.value.fields == ["description", "location"]


def test_problem_report_coordinates_come_together():
    report = ProblemCreate(title="Fuite", description="Eau", location="Tunis", location_lat=36.8)
    with pytest.raises(ValidationError):
        validate_problem_report(report)


def test_problem_create_rejects_unknown_danger_level():
    with pytest.raises(PydanticValidationError):
        ProblemCreate(title="Fuite", description="Eau", location="Tunis", danger_level="unknown")


def test_organization_requires_name_city_region():
    with pytest.raises(ValidationError) as exc_info:
        validate_organization(OrganizationCreate(name="Eco"))
    assert exc_info.value.fields == ["city", "region"]


def test_organization_optional_contact_is_checked():
    with pytest.raises(ValidationError):
        validate_organization(OrganizationCreate(name="Eco", city="Tunis", region="Tunis", email="nope"))
    validate_organization(OrganizationCreate(name="Eco", city="Tunis", region="Tunis", phone="71 234 567"))
