"""
Problem service - Entity Store access for reported problems.

DESIGN NOTE:
- Problems are created as PENDING by an authenticated reporter
- Status changes happen in back-office workflow, not here
- Problems are never deleted from this API
"""

import logging
from typing import List, Optional

from firebase_admin import firestore
from pydantic import ValidationError as PydanticValidationError

from ecolink.config.firebase import get_db
from ecolink.core.errors import AuthenticationRequired, MalformedRecord, RemoteFailure
from ecolink.models.problem import Problem, ProblemCreate, ProblemStatus
from ecolink.models.user import UserIdentity
from ecolink.utils.firestore_helpers import snapshot_to_dict
from ecolink.utils.geo import parse_coordinates
from ecolink.utils.validators import validate_problem_report

logger = logging.getLogger(__name__)


def to_problem(doc) -> Problem:
    """
    Convert a Firestore snapshot into a Problem.

    Out-of-set enum values become UNKNOWN; a document missing required
    fields raises MalformedRecord.
    """
    data = snapshot_to_dict(doc)
    try:
        return Problem(**data)
    except PydanticValidationError as e:
        raise MalformedRecord(f"Problem {doc.id} is malformed: {e.error_count()} error(s)", record_id=doc.id)


class ProblemService:
    """
    Service for problems in Firestore (`problems` collection).
    """

    COLLECTION = "problems"

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        """Firestore client, resolved on first use."""
        if self._db is None:
            self._db = get_db()
        return self._db

    def fetch_all(self) -> List[Problem]:
        """
        Retrieve every problem, newest first.

        Raises:
            RemoteFailure: the store query failed
        """
        try:
            query = self.db.collection(self.COLLECTION).order_by("created_at", direction=firestore.Query.DESCENDING)
            docs = list(query.stream())
        except Exception as e:
            logger.error(f"Failed to fetch problems: {str(e)}", exc_info=True)
            raise RemoteFailure(f"Failed to fetch problems: {str(e)}")

        problems = []
        for doc in docs:
            try:
                problems.append(to_problem(doc))
            except MalformedRecord as e:
                logger.warning(f"⚠️ Skipping problem: {e.message}")
        return problems

    def create(self, report: ProblemCreate, identity: Optional[UserIdentity]) -> Problem:
        """
        Store a new problem reported by `identity`.

        Flow:
        1. Reject anonymous callers (no store call)
        2. Validate the form (no store call)
        3. Fill coordinates from a "lat, lng" location when none were sent
        4. Insert with status PENDING and return the stored row

        Raises:
            AuthenticationRequired, ValidationError, RemoteFailure
        """
        if identity is None:
            raise AuthenticationRequired("Vous devez être connecté pour signaler un problème")

        validate_problem_report(report)

        lat, lng = report.location_lat, report.location_lng
        if lat is None and lng is None:
            coords = parse_coordinates(report.location)
            if coords:
                lat, lng = coords

        problem_data = {
            "title": report.title.strip(),
            "description": report.description.strip(),
            "location": report.location.strip(),
            "location_lat": lat,
            "location_lng": lng,
            "danger_level": report.danger_level.value,
            "status": ProblemStatus.PENDING.value,
            "image_url": report.image_url,
            "reporter_id": identity.id,
            "assigned_org_id": None,
            "created_at": firestore.SERVER_TIMESTAMP,
            "updated_at": firestore.SERVER_TIMESTAMP,
        }

        try:
            doc_ref = self.db.collection(self.COLLECTION).document()
            doc_ref.set(problem_data)
            created_doc = doc_ref.get()
        except Exception as e:
            logger.error(f"Failed to save problem to Firestore: {e}", exc_info=True)
            raise RemoteFailure(f"Impossible de signaler le problème: {str(e)}")

        logger.info(f"✅ Problem saved to Firestore: {created_doc.id} (reporter {identity.id})")
        return to_problem(created_doc)


# Global service instance (singleton pattern)
_problem_service = None


def get_problem_service() -> ProblemService:
    """Get or create ProblemService singleton."""
    global _problem_service
    if _problem_service is None:
        _problem_service = ProblemService()
    return _problem_service


def reset_problem_service() -> None:
    global _problem_service
    _problem_service = None
