"""
Auth Service - the identity interface.

Users live in the `users` collection with a bcrypt password hash; sessions
live in `sessions`, keyed by the SHA-256 of the session token. The rest of
the app only asks one question: is there an identity behind this token?
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from firebase_admin import firestore

from ecolink.config.firebase import get_db
from ecolink.core.errors import AuthenticationRequired, RemoteFailure, ValidationError
from ecolink.core.settings import settings
from ecolink.models.user import SignInRequest, SignUpRequest, UserIdentity
from ecolink.utils.firestore_helpers import snapshot_to_dict, where_filter
from ecolink.utils.security import generate_session_token, hash_password, hash_token, verify_password
from ecolink.utils.timestamps import parse_timestamp
from ecolink.utils.validators import validate_sign_in, validate_sign_up

logger = logging.getLogger(__name__)


def _to_identity(user_data: Dict) -> UserIdentity:
    return UserIdentity(
        id=user_data["id"],
        email=user_data.get("email", ""),
        first_name=user_data.get("first_name") or "",
        last_name=user_data.get("last_name") or "",
        phone=user_data.get("phone"),
        governorate=user_data.get("governorate"),
        municipality=user_data.get("municipality"),
        user_type=user_data.get("user_type") or "citoyen",
        created_at=parse_timestamp(user_data.get("created_at")),
    )


class AuthService:
    """
    Service for sign-up, sign-in, sign-out and session lookup.
    """

    USERS = "users"
    SESSIONS = "sessions"

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        """Firestore client, resolved on first use."""
        if self._db is None:
            self._db = get_db()
        return self._db

    def _get_user_by_email(self, email: str) -> Optional[Dict]:
        try:
            query = where_filter(self.db.collection(self.USERS), "email", "==", email.strip().lower()).limit(1)
            docs = list(query.stream())
        except Exception as e:
            logger.error(f"Failed to get user by email: {str(e)}")
            raise RemoteFailure(f"Failed to look up user: {str(e)}")
        return snapshot_to_dict(docs[0]) if docs else None

    def _open_session(self, user_id: str) -> str:
        token = generate_session_token()
        now = datetime.now(timezone.utc)
        try:
            self.db.collection(self.SESSIONS).document(hash_token(token)).set({
                "user_id": user_id,
                "created_at": now,
                "expires_at": now + timedelta(hours=settings.SESSION_TTL_HOURS),
            })
        except Exception as e:
            logger.error(f"Failed to open session for {user_id}: {e}", exc_info=True)
            raise RemoteFailure(f"Failed to open session: {str(e)}")
        return token

    def sign_up(self, form: SignUpRequest) -> Tuple[UserIdentity, str]:
        """
        Create an account and open a session.

        Returns:
            (identity, session token)

        Raises:
            ValidationError: invalid form or email already registered
            RemoteFailure: store error
        """
        validate_sign_up(form)

        email = form.email.strip().lower()
        if self._get_user_by_email(email):
            raise ValidationError("Un compte existe déjà avec cet email", fields=["email"])

        user_data = {
            "email": email,
            "password_hash": hash_password(form.password),
            "first_name": form.first_name.strip(),
            "last_name": form.last_name.strip(),
            "phone": form.phone.replace(" ", ""),
            "governorate": form.governorate.strip(),
            "municipality": form.municipality.strip(),
            "user_type": form.user_type.value,
            "created_at": firestore.SERVER_TIMESTAMP,
        }

        try:
            user_ref = self.db.collection(self.USERS).document()
            user_ref.set(user_data)
            created_doc = user_ref.get()
        except Exception as e:
            logger.error(f"Failed to create user: {str(e)}", exc_info=True)
            raise RemoteFailure(f"Failed to create account: {str(e)}")

        identity = _to_identity(snapshot_to_dict(created_doc))
        logger.info(f"User created: {identity.id}")
        return identity, self._open_session(identity.id)

    def sign_in(self, form: SignInRequest) -> Tuple[UserIdentity, str]:
        validate_sign_in(form)

        user_data = self._get_user_by_email(form.email)
        if not user_data or not verify_password(form.password, user_data.get("password_hash")):
            raise AuthenticationRequired("Email ou mot de passe incorrect")

        identity = _to_identity(user_data)
        logger.info(f"User signed in: {identity.id}")
        return identity, self._open_session(identity.id)

    def sign_out(self, token: Optional[str]) -> bool:
        token_hash = hash_token(token)
        if token_hash is None:
            return False
        try:
            self.db.collection(self.SESSIONS).document(token_hash).delete()
        except Exception as e:
            logger.error(f"Failed to close session: {e}")
            raise RemoteFailure(f"Failed to sign out: {str(e)}")
        return True

    def get_identity(self, token: Optional[str]) -> Optional[UserIdentity]:
        """
        Resolve a session token to the current identity.

        Returns None for missing, unknown or expired tokens, and when the
        store cannot be reached (the caller is then treated as anonymous).
        """
        token_hash = hash_token(token)
        if token_hash is None:
            return None

        try:
            session_doc = self.db.collection(self.SESSIONS).document(token_hash).get()
            if not session_doc.exists:
                return None

            session = session_doc.to_dict()
            expires_at = parse_timestamp(session.get("expires_at"))
            if expires_at is None or expires_at < datetime.now(timezone.utc):
                logger.info("Session expired")
                return None

            user_doc = self.db.collection(self.USERS).document(session["user_id"]).get()
            if not user_doc.exists:
                return None
            return _to_identity(snapshot_to_dict(user_doc))

        except Exception as e:
            logger.error(f"Failed to resolve session: {str(e)}")
            return None


_auth_service = None


def get_auth_service() -> AuthService:
    """Get or create AuthService singleton."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service


def reset_auth_service() -> None:
    global _auth_service
    _auth_service = None
