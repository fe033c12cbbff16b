"""
Organization service - Entity Store access for the RSE directory.

Organizations live in `organizations`, their services in
`organization_services` (one document per service, keyed by
organization_id). Only verified organizations are returned by fetch_all.
"""

import logging
from typing import List, Optional

from firebase_admin import firestore
from pydantic import ValidationError as PydanticValidationError

from ecolink.config.firebase import get_db
from ecolink.core.errors import AuthenticationRequired, MalformedRecord, RemoteFailure, ValidationError
from ecolink.models.organization import Organization, OrganizationCreate, OrganizationService, ServiceCreate
from ecolink.models.user import UserIdentity
from ecolink.utils.firestore_helpers import snapshot_to_dict, where_filter
from ecolink.utils.validators import validate_organization

logger = logging.getLogger(__name__)


def to_service(doc) -> OrganizationService:
    try:
        return OrganizationService(**snapshot_to_dict(doc))
    except PydanticValidationError as e:
        raise MalformedRecord(f"Service {doc.id} is malformed: {e.error_count()} error(s)", record_id=doc.id)


def to_organization(doc, services: Optional[List[OrganizationService]] = None) -> Organization:
    data = snapshot_to_dict(doc)
    data["services"] = services or []
    try:
        return Organization(**data)
    except PydanticValidationError as e:
        raise MalformedRecord(f"Organization {doc.id} is malformed: {e.error_count()} error(s)", record_id=doc.id)


class OrganizationDirectoryService:
    """
    Service for organizations and their services in Firestore.
    """

    COLLECTION = "organizations"
    SERVICES_COLLECTION = "organization_services"

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        """Firestore client, resolved on first use."""
        if self._db is None:
            self._db = get_db()
        return self._db

    def fetch_services(self, organization_id: str) -> List[OrganizationService]:
        """
        Services of one organization. A failed lookup yields an empty list so
        one broken sub-query does not hide the organization.
        """
        try:
            query = where_filter(self.db.collection(self.SERVICES_COLLECTION), "organization_id", "==", organization_id)
            docs = list(query.stream())
        except Exception as e:
            logger.warning(f"Failed to fetch services for organization {organization_id}: {e}")
            return []

        services = []
        for doc in docs:
            try:
                services.append(to_service(doc))
            except MalformedRecord as e:
                logger.warning(f"⚠️ Skipping service: {e.message}")
        return services

    def fetch_all(self) -> List[Organization]:
        """
        Retrieve verified organizations, best rated first, with services attached.

        Raises:
            RemoteFailure: the organizations query failed
        """
        try:
            query = where_filter(self.db.collection(self.COLLECTION), "verified", "==", True)
            query = query.order_by("rating", direction=firestore.Query.DESCENDING)
            docs = list(query.stream())
        except Exception as e:
            logger.error(f"Failed to fetch organizations: {str(e)}", exc_info=True)
            raise RemoteFailure(f"Failed to fetch organizations: {str(e)}")

        organizations = []
        for doc in docs:
            try:
                organizations.append(to_organization(doc, self.fetch_services(doc.id)))
            except MalformedRecord as e:
                logger.warning(f"⚠️ Skipping organization: {e.message}")
        return organizations

    def create(self, org: OrganizationCreate, identity: Optional[UserIdentity]) -> Organization:
        """
        Register an organization for `identity`.

        New organizations start unverified with rating 0 and RSE score 0;
        they stay out of the directory until verified externally.
        """
        if identity is None:
            raise AuthenticationRequired()

        validate_organization(org)

        org_data = org.model_dump(mode="json")
        org_data.update({
            "user_id": identity.id,
            "verified": False,
            "rating": 0,
            "rse_score": 0,
            "created_at": firestore.SERVER_TIMESTAMP,
            "updated_at": firestore.SERVER_TIMESTAMP,
        })

        try:
            doc_ref = self.db.collection(self.COLLECTION).document()
            doc_ref.set(org_data)
            created_doc = doc_ref.get()
        except Exception as e:
            logger.error(f"Failed to save organization to Firestore: {e}", exc_info=True)
            raise RemoteFailure(f"Impossible d'enregistrer l'organisation: {str(e)}")

        logger.info(f"✅ Organization registered: {created_doc.id} (owner {identity.id})")
        return to_organization(created_doc)

    def create_service(self, organization_id: str, service: ServiceCreate,
                       identity: Optional[UserIdentity]) -> OrganizationService:
        """Add a service to an existing organization."""
        if identity is None:
            raise AuthenticationRequired()

        try:
            org_doc = self.db.collection(self.COLLECTION).document(organization_id).get()
        except Exception as e:
            raise RemoteFailure(f"Failed to load organization {organization_id}: {str(e)}")

        if not org_doc.exists:
            raise ValidationError(f"Organisation introuvable: {organization_id}", fields=["organization_id"])

        service_data = service.model_dump(mode="json")
        service_data.update({
            "organization_id": organization_id,
            "created_at": firestore.SERVER_TIMESTAMP,
            "updated_at": firestore.SERVER_TIMESTAMP,
        })

        try:
            doc_ref = self.db.collection(self.SERVICES_COLLECTION).document()
            doc_ref.set(service_data)
            created_doc = doc_ref.get()
        except Exception as e:
            logger.error(f"Failed to save service to Firestore: {e}", exc_info=True)
            raise RemoteFailure(f"Impossible d'ajouter le service: {str(e)}")

        logger.info(f"✅ Service {created_doc.id} added to organization {organization_id}")
        return to_service(created_doc)


_organization_service = None


def get_organization_service() -> OrganizationDirectoryService:
    """Get or create OrganizationDirectoryService singleton."""
    global _organization_service
    if _organization_service is None:
        _organization_service = OrganizationDirectoryService()
    return _organization_service


def reset_organization_service() -> None:
    global _organization_service
    _organization_service = None
