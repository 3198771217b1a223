"""
Domain error taxonomy

Every rejection the booking core can produce has a class here. The HTTP layer
maps them onto the ApiResponse envelope through the handlers in main.py.
"""
from enum import Enum
from typing import Optional, Dict, Any


class RejectionReason(str, Enum):
    """Reason codes returned by the booking validator"""
    NOT_FOUND = "NOT_FOUND"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"


class BookflowError(Exception):
    """Base class for all domain errors"""

    code = "BOOKFLOW_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(BookflowError):
    """Malformed input: bad hours, non-positive duration, out-of-sequence step"""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(BookflowError):
    """Unknown organization, resource or professional"""

    code = RejectionReason.NOT_FOUND.value
    status_code = 404


class SlotUnavailableError(BookflowError):
    """Requested interval is not part of the computed availability"""

    code = RejectionReason.SLOT_UNAVAILABLE.value
    status_code = 409


class QuotaExceededError(BookflowError):
    """Plan limit reached"""

    code = RejectionReason.QUOTA_EXCEEDED.value
    status_code = 403


REJECTION_ERRORS = {
    RejectionReason.NOT_FOUND: NotFoundError,
    RejectionReason.SLOT_UNAVAILABLE: SlotUnavailableError,
    RejectionReason.QUOTA_EXCEEDED: QuotaExceededError,
}
