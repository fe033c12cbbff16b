from datetime import datetime, timedelta, timezone

import pytest

from ecolink.core.errors import AuthenticationRequired, RemoteFailure, ValidationError
from ecolink.models.onboarding import OnboardingSelections
from ecolink.models.organization import OrganizationCreate, ServiceCreate
from ecolink.models.problem import DangerLevel, ProblemCreate, ProblemStatus
from ecolink.models.user import SignInRequest, SignUpRequest, UserIdentity
from ecolink.services.auth_service import AuthService
from ecolink.services.organization_service import OrganizationDirectoryService
from ecolink.services.preferences_service import PreferencesService
from ecolink.services.problem_service import ProblemService
from ecolink.utils.security import hash_token

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def identity():
    return UserIdentity(id="u1", email="amira@example.tn")


class BrokenDB:
    def collection(self, name):
        raise ConnectionError("network down")


# ---------------------------------------------------------------------------
# Problems
# ---------------------------------------------------------------------------

def test_fetch_problems_newest_first_and_tolerant(db):
    problems = db.collection("problems")
    problems.document("old").set({"title": "Ancien", "reporter_id": "u1", "created_at": NOW})
    problems.document("new").set({"title": "Récent", "reporter_id": "u1", "danger_level": "EXTREME",
                                  "status": "archived", "created_at": NOW + timedelta(days=1)})
    problems.document("broken").set({"description": "no title, no reporter", "created_at": NOW})

    result = ProblemService(db).fetch_all()

    assert [p.id for p in result] == ["new", "old"]
    assert result[0].danger_level == DangerLevel.UNKNOWN
    assert result[0].status == ProblemStatus.UNKNOWN
    assert result[1].description == ""


def test_fetch_problems_wraps_store_errors():
    with pytest.raises(RemoteFailure):
        ProblemService(BrokenDB()).fetch_all()


def test_create_problem_is_pending_and_owned(db, identity):
    report = ProblemCreate(title=" Décharge ", description="Ordures", location="36.8065, 10.1815",
                           danger_level="medium")
    problem = ProblemService(db).create(report, identity)

    assert problem.title == "Décharge"
    assert problem.status == ProblemStatus.PENDING
    assert problem.reporter_id == "u1"
    assert (problem.location_lat, problem.location_lng) == (36.8065, 10.1815)
    assert problem.created_at is not None


def test_create_problem_requires_identity_before_store_call():
    service = ProblemService(BrokenDB())
    with pytest.raises(AuthenticationRequired):
        service.create(ProblemCreate(title="Fuite", description="Eau", location="Tunis"), None)


def test_create_problem_validates_before_store_call(identity):
    service = ProblemService(BrokenDB())
    with pytest.raises(ValidationError):
        service.create(ProblemCreate(title="Fuite"), identity)


def test_create_problem_store_failure(identity):
    with pytest.raises(RemoteFailure):
        ProblemService(BrokenDB()).create(ProblemCreate(title="Fuite", description="Eau", location="Tunis"), identity)


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

def test_fetch_organizations_verified_only_with_services(db):
    orgs = db.collection("organizations")
    orgs.document("a").set({"name": "A", "verified": True, "rating": 3.5})
    orgs.document("b").set({"name": "B", "verified": True, "rating": 4.9, "type": "cooperative"})
    orgs.document("c").set({"name": "C", "verified": False, "rating": 5})
    orgs.document("bad").set({"name": "Bad", "verified": True, "rating": 9})
    db.collection("organization_services").document("s1").set(
        {"organization_id": "b", "name": "Audit", "price": "1500 TND", "category": "Énergie", "impact_level": "fort"}
    )

    result = OrganizationDirectoryService(db).fetch_all()

    assert [o.id for o in result] == ["b", "a"]
    assert result[0].type.value == "unknown"
    assert [s.name for s in result[0].services] == ["Audit"]
    assert result[1].services == []


def test_register_organization_starts_unverified(db, identity):
    service = OrganizationDirectoryService(db)
    org = service.create(OrganizationCreate(name="Eco", city="Tunis", region="Tunis"), identity)

    assert not org.verified
    assert org.rating == 0
    assert org.rse_score == 0
    assert org.user_id == "u1"
    assert service.fetch_all() == []


def test_add_service_to_missing_organization(db, identity):
    service = OrganizationDirectoryService(db)
    with pytest.raises(ValidationError):
        service.create_service("nope", ServiceCreate(name="Audit", price="Gratuit", category="Énergie"), identity)


def test_add_service(db, identity):
    db.collection("organizations").document("a").set({"name": "A", "verified": True})
    service = OrganizationDirectoryService(db)

    created = service.create_service("a", ServiceCreate(name="Audit", price="Gratuit", category="Énergie"), identity)

    assert created.organization_id == "a"
    assert created.price == "Gratuit"
    assert [s.id for s in service.fetch_services("a")] == [created.id]


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

def test_sign_up_then_resolve_token(db, sign_up_payload):
    auth = AuthService(db)
    identity, token = auth.sign_up(SignUpRequest(**sign_up_payload()))

    assert identity.email == "amira@example.tn"
    assert auth.get_identity(token).id == identity.id
    stored = db.collection("users").document(identity.id).get().to_dict()
    assert stored["password_hash"] != "secret123"
    assert stored["phone"] == "+21622123456"


def test_duplicate_email_is_rejected(db, sign_up_payload):
    auth = AuthService(db)
    auth.sign_up(SignUpRequest(**sign_up_payload()))
    with pytest.raises(ValidationError) as exc_info:
        auth.sign_up(SignUpRequest(**sign_up_payload(email="AMIRA@example.tn")))
    assert exc_info.value.fields == ["email"]


def test_sign_in_with_wrong_password(db, sign_up_payload):
    auth = AuthService(db)
    auth.sign_up(SignUpRequest(**sign_up_payload()))

    with pytest.raises(AuthenticationRequired):
        auth.sign_in(SignInRequest(email="amira@example.tn", password="wrong-password"))

    identity, token = auth.sign_in(SignInRequest(email="amira@example.tn", password="secret123"))
    assert auth.get_identity(token).id == identity.id


def test_sign_out_and_expired_sessions(db, sign_up_payload):
    auth = AuthService(db)
    _, token = auth.sign_up(SignUpRequest(**sign_up_payload()))

    assert auth.sign_out(token)
    assert auth.get_identity(token) is None

    _, token = auth.sign_in(SignInRequest(email="amira@example.tn", password="secret123"))
    db.collection("sessions").document(hash_token(token)).update({"expires_at": NOW})
    assert auth.get_identity(token) is None


def test_unknown_token_is_anonymous(db):
    assert AuthService(db).get_identity("not-a-token") is None
    assert AuthService(db).get_identity(None) is None


# ---------------------------------------------------------------------------
# Onboarding preferences
# ---------------------------------------------------------------------------

def test_save_onboarding_preferences(db, identity):
    hook = PreferencesService(db).completion_hook(identity)
    hook(OnboardingSelections(interests=["nature"], activities=["eco-cleanup"]))

    stored = db.collection("onboarding_preferences").document("u1").get().to_dict()
    assert stored["interests"] == ["nature"]
    assert stored["activities"] == ["eco-cleanup"]
    assert stored["completed_at"] is not None
