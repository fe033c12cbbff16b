"""
Loading seed data into the Entity Store (mock DB or Firestore).

The seed file maps collection -> document id -> fields. `*_at` fields given
as ISO strings are stored as timestamps so ordering by created_at works.
"""

import json
import logging
from typing import Any, Dict

from ecolink.utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)

Seed = Dict[str, Dict[str, Dict[str, Any]]]


def load_seed(path: str) -> Seed:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def prepare_document(data: Dict[str, Any]) -> Dict[str, Any]:
    prepared = dict(data)
    for key, value in data.items():
        if key.endswith("_at") and isinstance(value, str):
            prepared[key] = parse_timestamp(value)
    return prepared


def write_seed(db: Any, seed: Seed, apply: bool = False) -> Dict[str, int]:
    """
    Write every seed document, or only list them when `apply` is False.

    A document that fails to write is logged and skipped.

    Returns:
        Documents written per collection (zeros on a dry run)
    """
    written = {}
    for collection, docs in seed.items():
        written[collection] = 0
        for doc_id, data in docs.items():
            if not apply:
                logger.info(f"Would write: {collection}/{doc_id}")
                continue
            try:
                # Firestore client and MockFirestore share .collection(name).document(id).set(data)
                db.collection(collection).document(doc_id).set(prepare_document(data))
                written[collection] += 1
                logger.info(f"Wrote: {collection}/{doc_id}")
            except Exception as e:
                logger.error(f"❌ Failed to write {collection}/{doc_id}: {e}")
    return written
