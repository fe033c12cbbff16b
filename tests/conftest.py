from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from ecolink.config import firebase
from ecolink.config.mock_firestore import MockFirestore
from ecolink.models.organization import Organization
from ecolink.models.problem import Problem
from ecolink.services.auth_service import reset_auth_service
from ecolink.services.entity_cache import reset_cache_registry
from ecolink.services.organization_service import reset_organization_service
from ecolink.services.preferences_service import reset_preferences_service
from ecolink.services.problem_service import reset_problem_service

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _reset_services():
    reset_auth_service()
    reset_cache_registry()
    reset_organization_service()
    reset_preferences_service()
    reset_problem_service()


@pytest.fixture
def db():
    """Fresh in-memory Firestore installed as the app's client."""
    mock = MockFirestore()
    firebase.set_db(mock)
    _reset_services()
    yield mock
    firebase.set_db(None)
    _reset_services()


@pytest.fixture
def client(db):
    from ecolink.main import app
    return TestClient(app)


@pytest.fixture
def make_problem():
    ids = count(1)

    def _make(**overrides) -> Problem:
        n = next(ids)
        data = {
            "id": f"p{n}",
            "title": f"Problème {n}",
            "description": "Description",
            "location": "Tunis",
            "danger_level": "low",
            "status": "pending",
            "reporter_id": "u1",
            "created_at": BASE_TIME + timedelta(hours=n),
        }
        data.update(overrides)
        return Problem(**data)

    return _make


@pytest.fixture
def make_org():
    ids = count(1)

    def _make(**overrides) -> Organization:
        n = next(ids)
        data = {
            "id": f"o{n}",
            "name": f"Organisation {n}",
            "type": "association",
            "category": "environnement",
            "city": "Tunis",
            "region": "Tunis",
            "rating": 4.0,
            "rse_score": 70,
            "availability_status": "disponible",
            "verified": True,
        }
        data.update(overrides)
        return Organization(**data)

    return _make


def _sign_up_payload(**overrides):
    payload = {
        "first_name": "Amira",
        "last_name": "Ben Salah",
        "email": "amira@example.tn",
        "password": "secret123",
        "confirm_password": "secret123",
        "phone": "+216 22 123 456",
        "governorate": "Tunis",
        "municipality": "La Marsa",
        "user_type": "citoyen",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def sign_up_payload():
    return _sign_up_payload


@pytest.fixture
def auth_headers(client):
    """Sign up a user through the API and return its session header."""
    response = client.post("/auth/sign-up", json=_sign_up_payload())
    assert response.status_code == 201
    return {"X-Session-Token": response.json()["token"]}
