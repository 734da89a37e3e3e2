"""Domain models."""

from privacy_api.models.consent import ConsentRecord, consent_key
from privacy_api.models.privacy import (
    AssessmentStatus,
    ConsentDisplayType,
    ConsentState,
    ConsentStatus,
    MessageId,
    StoreResult,
)

__all__ = [
    "ConsentRecord",
    "consent_key",
    "AssessmentStatus",
    "ConsentDisplayType",
    "ConsentState",
    "ConsentStatus",
    "MessageId",
    "StoreResult",
]
