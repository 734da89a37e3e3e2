"""Consent recording for basic mode.

Each submitted consent is validated and stored on its own; a bad record is
reported as a failure in its slot of the result list and never stops the
rest of the batch.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from fastapi import status
from pydantic import ValidationError

from privacy_api.models.consent import DEFAULT_CONSENT_DURATION_SECONDS, ConsentRecord
from privacy_api.models.privacy import ConsentState, MessageId, StoreResult
from privacy_api.schemas.privacy import ConsentInput
from privacy_api.services.store import ConsentStore
from privacy_api.utils.time import epoch_now

logger = logging.getLogger(__name__)


class ConsentValidationError(Exception):
    """Raised when a submitted consent cannot be normalized."""

    pass


@dataclass
class StoreConsentsOutcome:
    """Per-record results of a consent batch, in submission order."""

    results: list[dict[str, Any]] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return any(r["result"] == StoreResult.FAILURE.value for r in self.results)

    @property
    def status_code(self) -> int:
        """HTTP status for the batch: 207 when any record failed."""
        if self.has_failures:
            return status.HTTP_207_MULTI_STATUS
        return status.HTTP_200_OK

    def to_body(self) -> dict[str, Any]:
        return {"results": self.results}


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(problems)


def normalize_consent(
    payload: Any,
    now: int,
    client_ip: str | None = None,
    default_duration: int = DEFAULT_CONSENT_DURATION_SECONDS,
) -> ConsentRecord:
    """Turn a submitted consent into a complete record.

    Args:
        payload: Consent object as submitted
        now: Current time in epoch seconds
        client_ip: Caller's IP, used when no geoIP is supplied
        default_duration: Lifetime applied when no endTime is supplied

    Returns:
        Normalized ConsentRecord

    Raises:
        ConsentValidationError: If required fields are missing or invalid
    """
    if not isinstance(payload, dict):
        raise ConsentValidationError("Consent must be a JSON object")

    if not payload.get("subjectId") or not payload.get("purposeId"):
        raise ConsentValidationError("subjectId and purposeId are required")

    try:
        data = ConsentInput.model_validate(payload)
    except ValidationError as exc:
        raise ConsentValidationError(_describe_validation_error(exc)) from exc

    return ConsentRecord(
        id=data.id or f"consent-{uuid4().hex}",
        subject_id=data.subject_id,
        purpose_id=data.purpose_id,
        access_type_id=data.access_type_id or None,
        attribute_id=data.attribute_id or None,
        attribute_value=data.attribute_value or None,
        start_time=data.start_time if data.start_time is not None else now,
        end_time=data.end_time if data.end_time is not None else now + default_duration,
        state=data.state or ConsentState.ALLOW,
        is_global=data.is_global if data.is_global is not None else False,
        geo_ip=data.geo_ip or client_ip,
        custom_attributes=data.custom_attributes or {},
        is_external_subject=(
            data.is_external_subject if data.is_external_subject is not None else False
        ),
    )


def record_consents(
    store: ConsentStore,
    consents: Sequence[Any],
    path_prefix: str,
    client_ip: str | None = None,
    now: int | None = None,
    default_duration: int = DEFAULT_CONSENT_DURATION_SECONDS,
) -> StoreConsentsOutcome:
    """Validate and store a batch of consents.

    Args:
        store: Consent store to write to
        consents: Submitted consent objects
        path_prefix: Route prefix for the returned record paths
        client_ip: Caller's IP, the default geoIP
        now: Current time in epoch seconds (defaults to the wall clock)
        default_duration: Lifetime applied when no endTime is supplied

    Returns:
        StoreConsentsOutcome with one result per submitted consent
    """
    if now is None:
        now = epoch_now()

    outcome = StoreConsentsOutcome()

    for index, payload in enumerate(consents):
        try:
            record = normalize_consent(payload, now, client_ip, default_duration)
        except ConsentValidationError as exc:
            logger.warning(f"Rejected consent at index {index}: {exc}")
            outcome.results.append(
                {
                    "result": StoreResult.FAILURE.value,
                    "error": {
                        "messageId": MessageId.CONSENT_STORE_ERROR.value,
                        "messageDescription": str(exc),
                        "extraInfo": None,
                    },
                }
            )
            continue

        store.put(record)
        logger.info(
            f"Stored consent {record.id} purpose={record.purpose_id} state={record.state.value}",
            extra={"subject_id": record.subject_id, "action": "consent_stored"},
        )
        outcome.results.append(
            {
                "result": StoreResult.SUCCESS.value,
                "path": f"{path_prefix}/consents/{record.id}",
                "consent": record.to_dict(now),
            }
        )

    return outcome
