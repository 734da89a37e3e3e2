"""Pydantic request/response schemas."""

from privacy_api.schemas.privacy import (
    AssessmentItem,
    AssessmentResponse,
    ConsentInput,
    Decision,
    DecisionReason,
    ErrorResponse,
    MetadataResponse,
    PageMetadata,
    PrivacyItem,
    PrivacyRequest,
)

__all__ = [
    "AssessmentItem",
    "AssessmentResponse",
    "ConsentInput",
    "Decision",
    "DecisionReason",
    "ErrorResponse",
    "MetadataResponse",
    "PageMetadata",
    "PrivacyItem",
    "PrivacyRequest",
]
