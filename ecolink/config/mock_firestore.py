"""
In-process stand-in for the Firestore client used when USE_MOCK_DB=true.

Implements only the subset of the google-cloud-firestore API that EcoLink
calls: collection/document references, set/get/update, where/order_by/limit
queries and stream(). Data optionally persists to a JSON file so a local
server keeps its state across restarts.
"""

import copy
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from firebase_admin import firestore

logger = logging.getLogger(__name__)

_DATETIME_KEY = "__datetime__"


def _resolve_sentinels(data: Dict) -> Dict:
    """Replace SERVER_TIMESTAMP sentinels with the current UTC time."""
    resolved = {}
    for key, value in data.items():
        if value is firestore.SERVER_TIMESTAMP:
            resolved[key] = datetime.now(timezone.utc)
        elif isinstance(value, dict):
            resolved[key] = _resolve_sentinels(value)
        else:
            resolved[key] = copy.deepcopy(value)
    return resolved


def _encode(value):
    if isinstance(value, datetime):
        return {_DATETIME_KEY: value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode(obj: Dict):
    if _DATETIME_KEY in obj and len(obj) == 1:
        return datetime.fromisoformat(obj[_DATETIME_KEY])
    return obj


def _compare(field_value, op_string: str, value) -> bool:
    if op_string == "==":
        return field_value == value
    if op_string == "!=":
        return field_value != value
    if op_string == "in":
        return field_value in value
    if op_string == "not-in":
        return field_value not in value
    if op_string == "array_contains":
        return isinstance(field_value, list) and value in field_value
    if field_value is None:
        return False
    try:
        if op_string == ">=":
            return field_value >= value
        if op_string == ">":
            return field_value > value
        if op_string == "<=":
            return field_value <= value
        if op_string == "<":
            return field_value < value
    except TypeError:
        return False
    raise ValueError(f"Unsupported operator: {op_string}")


class MockDocumentSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict]:
        if self._data is None:
            return None
        return copy.deepcopy(self._data)


class MockDocumentReference:
    def __init__(self, store: "MockFirestore", collection: str, doc_id: str):
        self._store = store
        self._collection = collection
        self.id = doc_id

    def set(self, data: Dict, merge: bool = False) -> None:
        docs = self._store._collection_data(self._collection)
        resolved = _resolve_sentinels(data)
        if merge and self.id in docs:
            docs[self.id].update(resolved)
        else:
            docs[self.id] = resolved
        self._store._persist()

    def update(self, data: Dict) -> None:
        docs = self._store._collection_data(self._collection)
        if self.id not in docs:
            raise KeyError(f"No document to update: {self._collection}/{self.id}")
        docs[self.id].update(_resolve_sentinels(data))
        self._store._persist()

    def get(self) -> MockDocumentSnapshot:
        docs = self._store._collection_data(self._collection)
        return MockDocumentSnapshot(self.id, docs.get(self.id))

    def delete(self) -> None:
        self._store._collection_data(self._collection).pop(self.id, None)
        self._store._persist()


class MockQuery:
    def __init__(self, store: "MockFirestore", collection: str):
        self._store = store
        self._collection = collection
        self._filters: List[tuple] = []
        self._orders: List[tuple] = []
        self._limit: Optional[int] = None

    def _clone(self) -> "MockQuery":
        query = MockQuery(self._store, self._collection)
        query._filters = list(self._filters)
        query._orders = list(self._orders)
        query._limit = self._limit
        return query

    def where(self, field_path: str, op_string: str, value) -> "MockQuery":
        query = self._clone()
        query._filters.append((field_path, op_string, value))
        return query

    def order_by(self, field_path: str, direction: str = firestore.Query.ASCENDING) -> "MockQuery":
        query = self._clone()
        query._orders.append((field_path, direction))
        return query

    def limit(self, count: int) -> "MockQuery":
        query = self._clone()
        query._limit = count
        return query

    def stream(self) -> Iterator[MockDocumentSnapshot]:
        docs = self._store._collection_data(self._collection)
        rows = [
            (doc_id, data) for doc_id, data in docs.items()
            if all(_compare(data.get(f), op, v) for f, op, v in self._filters)
        ]

        # Apply orderings last-to-first so the first order_by wins (stable sort)
        for field_path, direction in reversed(self._orders):
            descending = direction == firestore.Query.DESCENDING
            present = [r for r in rows if r[1].get(field_path) is not None]
            missing = [r for r in rows if r[1].get(field_path) is None]
            present.sort(key=lambda r: r[1][field_path], reverse=descending)
            rows = present + missing

        if self._limit is not None:
            rows = rows[:self._limit]

        for doc_id, data in rows:
            yield MockDocumentSnapshot(doc_id, copy.deepcopy(data))

    def get(self) -> List[MockDocumentSnapshot]:
        return list(self.stream())


class MockCollectionReference(MockQuery):
    def __init__(self, store: "MockFirestore", collection: str):
        super().__init__(store, collection)
        self.id = collection

    def document(self, doc_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._store, self._collection, doc_id or uuid.uuid4().hex[:20])


class MockFirestore:
    """Dictionary-backed Firestore client: {collection: {doc_id: data}}."""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        if path and os.path.exists(path):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    self._data = json.load(f, object_hook=_decode)
                logger.info(f"Loaded mock DB from {path}")
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Could not load mock DB from {path}: {e}, starting empty")
                self._data = {}

    def _collection_data(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._data.setdefault(name, {})

    def _persist(self) -> None:
        if not self.path:
            return
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, default=_encode, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to persist mock DB to {self.path}: {e}")

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def collections(self) -> List[MockCollectionReference]:
        return [MockCollectionReference(self, name) for name in self._data]


def get_mock_db(path: Optional[str] = None) -> MockFirestore:
    return MockFirestore(path)
