"""Enumerations shared by the privacy consent API.

These mirror the value sets of the consent-management contract: how a
purpose is presented, what the data subject decided, and where a consent
sits in time.
"""

from enum import Enum


class ConsentDisplayType(str, Enum):
    """How a purpose should be presented when collecting consent."""

    DO_NOT_SHOW = "do_not_show"
    TRANSPARENT = "transparent"
    OPT_IN_OR_OUT = "opt_in_or_out"
    ALLOW_OR_DENY = "allow_or_deny"


class ConsentState(str, Enum):
    """Disposition recorded for a consent."""

    ALLOW = "allow"
    DENY = "deny"
    OPT_IN = "opt_in"
    OPT_OUT = "opt_out"
    TRANSPARENT = "transparent"


class ConsentStatus(str, Enum):
    """Temporal status of a consent, derived from its time bounds."""

    ACTIVE = "active"
    EXPIRED = "expired"
    FUTURE = "future"
    NONE = "none"


class AssessmentStatus(str, Enum):
    """Aggregate outcome of an assessment request."""

    APPROVED = "approved"
    NEEDS_CONSENT = "needs_consent"
    MULTISTATUS = "multistatus"
    DENIED = "denied"
    UNKNOWN = "unknown"


class StoreResult(str, Enum):
    """Outcome of storing a single consent record."""

    SUCCESS = "success"
    FAILURE = "failure"


class MessageId(str, Enum):
    """Message identifiers used in error bodies and decision reasons."""

    # Request validation (400)
    INVALID_REQUEST = "INVALID_REQUEST"
    MISSING_SUBJECT_ID = "MISSING_SUBJECT_ID"
    MISSING_PURPOSE_ID = "MISSING_PURPOSE_ID"
    MISSING_ITEMS = "MISSING_ITEMS"

    # Decision reasons (embedded in successful assessments)
    CONSENT_DENIED = "CONSENT_DENIED"
    CONSENT_FUTURE = "CONSENT_FUTURE"
    CONSENT_EXPIRED = "CONSENT_EXPIRED"

    # Consent storage
    CONSENT_STORE_ERROR = "CONSENT_STORE_ERROR"
    CONSENT_NOT_FOUND = "CONSENT_NOT_FOUND"

    # Authentication (verify mode)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    AUTH_ERROR = "AUTH_ERROR"

    # Upstream and unexpected failures
    PRIVACY_API_ERROR = "PRIVACY_API_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# States that grant access while a consent is active
APPROVING_STATES = frozenset(
    {ConsentState.ALLOW, ConsentState.OPT_IN, ConsentState.TRANSPARENT}
)

# States that withhold access while a consent is active
DENYING_STATES = frozenset({ConsentState.DENY, ConsentState.OPT_OUT})
