import logging
from datetime import datetime, timedelta, timezone

import pytest

from ecolink.services.entity_cache import ORGANIZATIONS, PROBLEMS, get_cache_registry

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def seeded(db):
    problems = db.collection("problems")
    problems.document("p1").set({"title": "Déchets au bord du lac", "description": "Plastiques",
                                 "location": "Lac de Tunis", "location_lat": 36.83, "location_lng": 10.23,
                                 "danger_level": "high", "status": "pending", "reporter_id": "u0",
                                 "created_at": NOW})
    problems.document("p2").set({"title": "Fumée suspecte", "description": "Usine",
                                 "location": "34.7406, 10.7603", "danger_level": "medium",
                                 "status": "resolved", "reporter_id": "u0",
                                 "created_at": NOW + timedelta(hours=1)})
    problems.document("p3").set({"title": "Fuite d'égout", "description": "Eaux usées",
                                 "location": "Sousse", "danger_level": "nuclear",
                                 "status": "pending", "reporter_id": "u0",
                                 "created_at": NOW + timedelta(hours=2)})

    orgs = db.collection("organizations")
    orgs.document("o1").set({"name": "EcoSolutions Tunisie", "type": "entreprise", "category": "environnement",
                             "city": "Tunis", "region": "Tunis", "rating": 4.8, "rse_score": 92,
                             "certifications": ["ISO 14001"], "availability_status": "disponible",
                             "verified": True})
    orgs.document("o2").set({"name": "SocialTech Solutions", "type": "entreprise", "category": "social",
                             "city": "Sousse", "region": "Sousse", "rating": 4.2, "rse_score": 85,
                             "availability_status": "occupé", "verified": True})
    db.collection("organization_services").document("s1").set(
        {"organization_id": "o1", "name": "Audit énergétique", "price": "1500 TND", "category": "Énergie"}
    )
    return db


def test_root_and_health(client):
    assert client.get("/").json()["service"] == "EcoLink"
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/health/db").json()["connected"] is True


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def test_sign_up_sign_in_me_sign_out(client, sign_up_payload):
    response = client.post("/auth/sign-up", json=sign_up_payload())
    assert response.status_code == 201
    token = response.json()["token"]

    me = client.get("/auth/me", headers={"X-Session-Token": token})
    assert me.status_code == 200
    assert me.json()["email"] == "amira@example.tn"

    response = client.post("/auth/sign-in", json={"email": "amira@example.tn", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["user"]["first_name"] == "Amira"

    client.post("/auth/sign-out", headers={"X-Session-Token": token})
    assert client.get("/auth/me", headers={"X-Session-Token": token}).status_code == 401


def test_sign_up_validation_error(client, sign_up_payload):
    response = client.post("/auth/sign-up", json=sign_up_payload(phone="123"))
    assert response.status_code == 422
    assert response.json()["fields"] == ["phone"]


def test_sign_in_bad_credentials(client):
    response = client.post("/auth/sign-in", json={"email": "ghost@example.tn", "password": "whatever"})
    assert response.status_code == 401


# ---------------------------------------------------------------------------
# Problems
# ---------------------------------------------------------------------------

def test_list_problems_default_is_recent_first(client, seeded):
    body = client.get("/problems").json()
    assert [p["id"] for p in body["problems"]] == ["p3", "p2", "p1"]
    assert body["problems"][0]["danger_level"] == "unknown"
    assert body["active_filters"] == 0


def test_list_problems_filters_and_sort(client, seeded):
    body = client.get("/problems", params={"status": "pending", "sort_by": "danger-high"}).json()
    assert [p["id"] for p in body["problems"]] == ["p1", "p3"]
    assert body["active_filters"] == 1

    body = client.get("/problems", params={"search": "FUMÉE", "danger_level": "all"}).json()
    assert [p["id"] for p in body["problems"]] == ["p2"]


def test_list_problems_rejects_unknown_sort_key(client, seeded, caplog):
    with caplog.at_level(logging.WARNING, logger="ecolink.main"):
        response = client.get("/problems", params={"sort_by": "random"})

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["query", "sort_by"]
    assert "Rejected GET /problems" in caplog.text


@pytest.fixture
def store_reads(seeded, monkeypatch):
    """Names of the collections opened on the store from now on."""
    reads = []
    collection = seeded.collection

    def recording_collection(name):
        reads.append(name)
        return collection(name)

    monkeypatch.setattr(seeded, "collection", recording_collection)
    return reads


def test_report_problem_requires_authentication(client, seeded, store_reads):
    response = client.post("/problems", json={"title": "Fuite", "description": "Eau", "location": "Tunis"})

    assert response.status_code == 401
    assert response.json()["error"] == "AuthenticationRequired"
    assert store_reads == []
    assert client.get("/problems").json()["count"] == 3


def test_report_problem(client, seeded, auth_headers):
    response = client.post(
        "/problems",
        json={"title": "Décharge", "description": "Ordures", "location": "36.8, 10.18", "danger_level": "medium"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["location_lat"] == 36.8

    assert client.get("/problems").json()["count"] == 4


def test_report_problem_validation(client, auth_headers):
    response = client.post("/problems", json={"title": "Fuite"}, headers=auth_headers)
    assert response.status_code == 422
    assert response.json()["fields"] == ["description", "location"]


def test_problem_stats(client, seeded):
    body = client.get("/problems/stats").json()
    assert body["total"] == 3
    assert body["pending"] == 2
    assert body["resolved"] == 1
    assert body["resolution_rate"] == 33
    assert body["by_danger_level"]["unknown"] == 1


def test_problem_stats_empty(client, db):
    body = client.get("/problems/stats").json()
    assert body["total"] == 0
    assert body["resolution_rate"] == 0


def test_labels(client):
    labels = client.get("/problems/labels").json()
    assert labels["status"]["in-progress"] == "En cours"
    assert labels["danger_level"]["unknown"] == "Inconnu"


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

def test_directory_search_and_boundaries(client, seeded):
    body = client.get("/organizations").json()
    assert [o["id"] for o in body["organizations"]] == ["o1", "o2"]
    assert body["organizations"][0]["services"][0]["price"] == "1500 TND"

    body = client.get("/organizations", params={"search": "sfax"}).json()
    assert body["organizations"] == []

    body = client.get("/organizations", params={"rse_score": 85, "sort_by": "distance"}).json()
    assert [o["id"] for o in body["organizations"]] == ["o2", "o1"]


def test_directory_categorical_filters(client, seeded):
    body = client.get("/organizations", params={"type": "entreprise", "availability": "occupé"}).json()
    assert [o["id"] for o in body["organizations"]] == ["o2"]
    assert body["active_filters"] == 2

    body = client.get("/organizations", params={"certification": "true"}).json()
    assert [o["id"] for o in body["organizations"]] == ["o1"]


def test_directory_empty_state(client, db):
    assert client.get("/organizations").json()["organizations"] == []
    stats = client.get("/organizations/stats").json()
    assert stats == {"total": 0, "service_count": 0, "available_count": 0, "average_score": 0}


def test_directory_stats(client, seeded):
    stats = client.get("/organizations/stats").json()
    assert stats["total"] == 2
    assert stats["service_count"] == 1
    assert stats["available_count"] == 1
    # (92 + 85) / 2 = 88.5
    assert stats["average_score"] == 89


def test_register_organization_and_service(client, db, auth_headers):
    response = client.post("/organizations", json={"name": "Eco", "city": "Tunis", "region": "Tunis"},
                           headers=auth_headers)
    assert response.status_code == 201
    org = response.json()
    assert org["verified"] is False

    response = client.post(f"/organizations/{org['id']}/services",
                           json={"name": "Audit", "price": "Gratuit", "category": "Énergie"},
                           headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["organization_id"] == org["id"]

    # Unverified organizations stay out of the directory
    assert client.get("/organizations").json()["count"] == 0


def test_register_organization_requires_authentication(client, store_reads):
    response = client.post("/organizations", json={"name": "Eco", "city": "Tunis", "region": "Tunis"})
    assert response.status_code == 401
    assert store_reads == []


# ---------------------------------------------------------------------------
# Map, dashboard
# ---------------------------------------------------------------------------

def test_map_markers(client, seeded):
    markers = client.get("/map/problems").json()
    by_id = {m["id"]: m for m in markers}

    assert set(by_id) == {"p1", "p2"}
    assert by_id["p1"]["color"] == "#ef4444"
    assert (by_id["p2"]["latitude"], by_id["p2"]["longitude"]) == (34.7406, 10.7603)


def test_map_config(client):
    config = client.get("/map/config").json()
    assert config["zoom"] == 6
    assert "access_token" in config


def test_dashboard(client, seeded):
    body = client.get("/dashboard", params={"limit": 2}).json()
    assert body["problems"]["total"] == 3
    assert body["organizations"]["total"] == 2
    assert [p["id"] for p in body["recent_problems"]] == ["p3", "p2"]


def test_caches_are_released_after_each_request(client, seeded):
    client.get("/dashboard")
    registry = get_cache_registry()
    assert registry.subscriber_count(PROBLEMS) == 0
    assert registry.subscriber_count(ORGANIZATIONS) == 0


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------

def test_onboarding_catalog(client):
    body = client.get("/onboarding/catalog").json()
    assert len(body["interests"]) == 12
    assert len(body["activities"]) == 6


def test_onboarding_recommendations(client):
    body = client.get("/onboarding/activities", params={"interests": "nature,food"}).json()
    assert [a["id"] for a in body["recommended"]] == ["tree-planting", "organic-cooking", "eco-cleanup"]
    assert len(body["other"]) == 3


def test_onboarding_transitions(client):
    state = {"step": "welcome", "interests": [], "activities": []}

    body = client.post("/onboarding/transition", json={"state": state, "action": "confirm_welcome"}).json()
    state = body["state"]
    assert state["step"] == "interests"

    body = client.post("/onboarding/transition", json={"state": state, "action": "submit_interests"}).json()
    assert body["changed"] is False
    assert body["state"]["step"] == "interests"

    body = client.post("/onboarding/transition",
                       json={"state": state, "action": "submit_interests", "selection": ["transport"]}).json()
    assert body["state"]["step"] == "activities"
    assert [a["id"] for a in body["split"]["recommended"]] == ["bike-tour"]


def test_onboarding_invalid_transition(client):
    response = client.post("/onboarding/transition",
                           json={"state": {"step": "welcome"}, "action": "submit_activities"})
    assert response.status_code == 422
    assert response.json()["error"] == "WizardTransitionError"


def test_onboarding_complete_persists_for_signed_in_user(client, db, auth_headers):
    state = {"step": "complete", "interests": ["nature"], "activities": ["eco-cleanup"]}

    body = client.post("/onboarding/complete", json=state, headers=auth_headers).json()
    assert body["saved"] is True

    user_id = client.get("/auth/me", headers=auth_headers).json()["id"]
    stored = db.collection("onboarding_preferences").document(user_id).get()
    assert stored.exists
    assert stored.to_dict()["activities"] == ["eco-cleanup"]


def test_onboarding_complete_anonymous_is_not_stored(client, db):
    state = {"step": "complete", "interests": ["nature"], "activities": []}
    body = client.post("/onboarding/complete", json=state).json()
    assert body["saved"] is False
    assert db.collection("onboarding_preferences").get() == []


# ---------------------------------------------------------------------------
# Unreachable store
# ---------------------------------------------------------------------------

@pytest.fixture
def unreachable_store(db, monkeypatch):
    def failing_get_db():
        raise RuntimeError("Firestore not initialized and initialization failed")

    monkeypatch.setattr("ecolink.services.problem_service.get_db", failing_get_db)
    monkeypatch.setattr("ecolink.services.organization_service.get_db", failing_get_db)


def test_lists_degrade_to_empty_when_store_unreachable(client, unreachable_store):
    response = client.get("/problems")
    assert response.status_code == 200
    body = response.json()
    assert body["problems"] == []
    assert "Firestore not initialized" in body["last_error"]

    response = client.get("/organizations")
    assert response.status_code == 200
    assert response.json()["organizations"] == []
    assert response.json()["last_error"]


def test_stats_map_and_dashboard_survive_unreachable_store(client, unreachable_store):
    assert client.get("/problems/stats").json()["total"] == 0
    assert client.get("/organizations/stats").json()["total"] == 0
    assert client.get("/map/problems").json() == []
    assert client.get("/dashboard").json()["recent_problems"] == []


def test_create_reports_remote_failure_when_store_unreachable(client, unreachable_store, auth_headers, caplog):
    with caplog.at_level(logging.ERROR, logger="ecolink.main"):
        response = client.post("/problems", json={"title": "Fuite", "description": "Eau", "location": "Tunis"},
                               headers=auth_headers)
    assert "RemoteFailure on POST /problems" in caplog.text
    assert response.status_code == 502
    assert response.json()["error"] == "RemoteFailure"
