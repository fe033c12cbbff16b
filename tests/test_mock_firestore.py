from datetime import datetime, timezone

from firebase_admin import firestore

from ecolink.config.mock_firestore import MockFirestore
from ecolink.utils.firestore_helpers import where_filter


def test_query_where_order_limit():
    db = MockFirestore()
    orgs = db.collection("organizations")
    orgs.document("a").set({"rating": 3, "verified": True})
    orgs.document("b").set({"rating": 5, "verified": True})
    orgs.document("c").set({"rating": 4, "verified": False})
    orgs.document("d").set({"verified": True})

    query = where_filter(orgs, "verified", "==", True).order_by("rating", direction=firestore.Query.DESCENDING)
    assert [doc.id for doc in query.stream()] == ["b", "a", "d"]
    assert [doc.id for doc in query.limit(1).stream()] == ["b"]


def test_server_timestamp_and_merge():
    db = MockFirestore()
    ref = db.collection("problems").document("p1")
    ref.set({"title": "Fuite", "created_at": firestore.SERVER_TIMESTAMP})
    ref.set({"status": "pending"}, merge=True)

    data = ref.get().to_dict()
    assert isinstance(data["created_at"], datetime)
    assert data["title"] == "Fuite"
    assert data["status"] == "pending"


def test_missing_document():
    db = MockFirestore()
    snapshot = db.collection("users").document("ghost").get()
    assert not snapshot.exists
    assert snapshot.to_dict() is None


def test_persists_to_json_file(tmp_path):
    path = str(tmp_path / "mock_db.json")
    created = datetime(2024, 5, 1, tzinfo=timezone.utc)

    MockFirestore(path).collection("problems").document("p1").set({"title": "Fuite", "created_at": created})

    reloaded = MockFirestore(path).collection("problems").document("p1").get().to_dict()
    assert reloaded == {"title": "Fuite", "created_at": created}
    assert [c.id for c in MockFirestore(path).collections()] == ["problems"]
