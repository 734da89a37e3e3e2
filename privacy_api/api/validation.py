"""Request body validation shared by the basic and verify endpoints.

Bodies are accepted as raw JSON and checked here so each problem maps to
its own message id instead of a generic framework validation error.
"""

from typing import Any

from pydantic import ValidationError

from privacy_api.core.errors import RequestValidationFailed
from privacy_api.models.privacy import ConsentState, MessageId
from privacy_api.schemas.privacy import PrivacyRequest


def validate_privacy_request(payload: Any) -> PrivacyRequest:
    """Validate an assessment or page metadata request body.

    Raises:
        RequestValidationFailed: If the subject, the items, or an item's
            purpose is missing, or the body is otherwise malformed
    """
    if not isinstance(payload, dict):
        raise RequestValidationFailed(
            "Invalid request: subjectId and items are required"
        )

    if not payload.get("subjectId"):
        raise RequestValidationFailed(
            "Subject ID is required", MessageId.MISSING_SUBJECT_ID
        )

    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise RequestValidationFailed(
            "Items array is required and cannot be empty", MessageId.MISSING_ITEMS
        )

    for item in items:
        if not isinstance(item, dict):
            raise RequestValidationFailed("Each item must be a JSON object")
        # A profile stands in for the purpose
        if item.get("profileId"):
            continue
        if not item.get("purposeId"):
            raise RequestValidationFailed(
                "Purpose ID is required for each item when profile ID is not provided",
                MessageId.MISSING_PURPOSE_ID,
            )

    try:
        return PrivacyRequest.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationFailed(f"Invalid request: {_summarize(exc)}") from exc


def validate_consents_payload(payload: Any) -> list[Any]:
    """Validate that a consent storage body is a non-empty array.

    Individual records are validated later, one at a time.
    """
    if not isinstance(payload, list) or not payload:
        raise RequestValidationFailed(
            "Invalid request: array of consents is required"
        )
    return payload


def validate_verify_consents(payload: Any) -> list[dict[str, Any]]:
    """Validate a consent storage body bound for the privacy service.

    Unlike basic mode, every record must be valid before anything is sent.
    """
    consents = validate_consents_payload(payload)

    for index, consent in enumerate(consents):
        if not isinstance(consent, dict):
            raise RequestValidationFailed(
                f"Consent at index {index} must be a JSON object"
            )
        if not consent.get("subjectId"):
            raise RequestValidationFailed(
                f"Subject ID is required for consent at index {index}",
                MessageId.MISSING_SUBJECT_ID,
            )
        if not consent.get("purposeId"):
            raise RequestValidationFailed(
                f"Purpose ID is required for consent at index {index}",
                MessageId.MISSING_PURPOSE_ID,
            )
        state = consent.get("state")
        if state is not None and state not in {s.value for s in ConsentState}:
            raise RequestValidationFailed(
                f"Unknown consent state '{state}' for consent at index {index}"
            )

    return consents


def _summarize(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)
