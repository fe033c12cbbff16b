"""
Error taxonomy for EcoLink.

Every error raised by the service layer derives from EcoLinkError so the
FastAPI exception handlers in main.py can translate them to HTTP responses.
None of these are fatal: the worst case is a stale or empty view.
"""

from typing import Dict, List, Optional


class EcoLinkError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict:
        return {"error": self.__class__.__name__, "detail": self.message}


class AuthenticationRequired(EcoLinkError):
    """A create operation was attempted without an authenticated identity."""

    status_code = 401

    def __init__(self, message: str = "User must be authenticated"):
        super().__init__(message)


class ValidationError(EcoLinkError):
    """
    Malformed form input, caught before any call to the Entity Store.

    `fields` lists the offending field names so the client can show the
    message inline.
    """

    status_code = 422

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> Dict:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class WizardTransitionError(ValidationError):
    """An onboarding action is not allowed from the current step."""


class RemoteFailure(EcoLinkError):
    """Any error returned by the Entity Store on fetch or create."""

    status_code = 502


class MalformedRecord(EcoLinkError):
    """A document from the store could not be converted into a model."""

    status_code = 500

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id
