"""
Preferences Service - stores onboarding selections.

This is the persistence hook behind the wizard's completion callback; the
wizard itself never touches the store.
"""

import logging
from typing import Dict

from firebase_admin import firestore

from ecolink.config.firebase import get_db
from ecolink.core.errors import RemoteFailure
from ecolink.models.onboarding import OnboardingSelections
from ecolink.models.user import UserIdentity

logger = logging.getLogger(__name__)


class PreferencesService:
    COLLECTION = "onboarding_preferences"

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        """Firestore client, resolved on first use."""
        if self._db is None:
            self._db = get_db()
        return self._db

    def save(self, user_id: str, selections: OnboardingSelections) -> Dict:
        data = {
            "user_id": user_id,
            "interests": list(selections.interests),
            "activities": list(selections.activities),
            "completed_at": firestore.SERVER_TIMESTAMP,
        }
        try:
            self.db.collection(self.COLLECTION).document(user_id).set(data)
        except Exception as e:
            logger.error(f"Failed to save onboarding preferences for {user_id}: {e}", exc_info=True)
            raise RemoteFailure(f"Failed to save preferences: {str(e)}")

        logger.info(f"Onboarding preferences saved for {user_id}")
        return {"user_id": user_id, "interests": data["interests"], "activities": data["activities"]}

    def completion_hook(self, identity: UserIdentity):
        """Completion callback bound to one user."""
        return lambda selections: self.save(identity.id, selections)


_preferences_service = None


def get_preferences_service() -> PreferencesService:
    global _preferences_service
    if _preferences_service is None:
        _preferences_service = PreferencesService()
    return _preferences_service


def reset_preferences_service() -> None:
    global _preferences_service
    _preferences_service = None
