"""Consent assessment for basic mode.

Decides, for each requested item, whether the subject's recorded consent
approves the data access, and rolls the per-item decisions up into a
single status.
"""

from collections.abc import Sequence

from privacy_api.models.consent import ConsentRecord
from privacy_api.models.privacy import (
    APPROVING_STATES,
    DENYING_STATES,
    AssessmentStatus,
    ConsentStatus,
    MessageId,
)
from privacy_api.schemas.privacy import (
    AssessmentItem,
    AssessmentResponse,
    Decision,
    DecisionReason,
    PrivacyItem,
)
from privacy_api.services.store import ConsentStore
from privacy_api.utils.time import epoch_now


def _reason(message_id: MessageId, description: str) -> DecisionReason:
    return DecisionReason(
        message_id=message_id.value,
        message_description=description,
        extra_info=None,
    )


def decide(record: ConsentRecord | None, now: int) -> Decision:
    """Compute the decision for one item given its stored consent.

    Args:
        record: Stored consent for the item's key, or None
        now: Current time in epoch seconds

    Returns:
        Decision for the item

    Raises:
        ValueError: If the record's state is neither approving nor denying
    """
    if record is None:
        # Nothing recorded yet: the caller must collect consent
        return Decision(
            approved=False,
            approval_required=True,
            prompt_for_consent=True,
            reason=None,
        )

    consent_status = record.status_at(now)

    if consent_status == ConsentStatus.ACTIVE:
        if record.state in APPROVING_STATES:
            return Decision(
                approved=True,
                approval_required=False,
                prompt_for_consent=False,
            )
        if record.state in DENYING_STATES:
            # An explicit denial stands; do not ask again
            return Decision(
                approved=False,
                approval_required=False,
                prompt_for_consent=False,
                reason=_reason(
                    MessageId.CONSENT_DENIED, "User has explicitly denied consent"
                ),
            )
        raise ValueError(f"Unclassified consent state: {record.state}")

    if consent_status == ConsentStatus.FUTURE:
        return Decision(
            approved=False,
            approval_required=False,
            prompt_for_consent=False,
            reason=_reason(
                MessageId.CONSENT_FUTURE, "Consent will be active in the future"
            ),
        )

    if consent_status == ConsentStatus.EXPIRED:
        return Decision(
            approved=False,
            approval_required=False,
            prompt_for_consent=True,
            reason=_reason(MessageId.CONSENT_EXPIRED, "Consent has expired"),
        )

    raise ValueError(f"Unexpected consent status: {consent_status}")


def aggregate_status(decisions: Sequence[Decision]) -> AssessmentStatus:
    """Roll per-item decisions up into the overall assessment status.

    Checked in order: all approved, any needing consent, a mix of approved
    and denied, all denied. Mixed results are reported before all-denied.
    """
    denied = [d for d in decisions if not d.approved and not d.prompt_for_consent]

    all_approved = all(d.approved for d in decisions)
    some_need_consent = any(d.prompt_for_consent for d in decisions)
    some_approved_some_denied = any(d.approved for d in decisions) and bool(denied)
    all_denied = len(denied) == len(decisions)

    if all_approved:
        return AssessmentStatus.APPROVED
    if some_need_consent:
        return AssessmentStatus.NEEDS_CONSENT
    if some_approved_some_denied:
        return AssessmentStatus.MULTISTATUS
    if all_denied:
        return AssessmentStatus.DENIED
    return AssessmentStatus.UNKNOWN


def assess(
    store: ConsentStore,
    subject_id: str,
    items: Sequence[PrivacyItem],
    now: int | None = None,
) -> AssessmentResponse:
    """Assess every item for a subject against the consent store.

    Args:
        store: Consent store to read from
        subject_id: Data subject being assessed
        items: Requested items, in request order
        now: Evaluation time in epoch seconds (defaults to the wall clock)

    Returns:
        AssessmentResponse with one entry per item and the overall status
    """
    if now is None:
        now = epoch_now()

    assessment = []
    for item in items:
        record = store.get(
            subject_id,
            item.purpose_id,
            item.access_type_id,
            item.attribute_id,
            item.attribute_value,
        )
        assessment.append(
            AssessmentItem(
                purpose_id=item.purpose_id,
                access_type_id=item.access_type_id,
                attribute_id=item.attribute_id,
                attribute_value=item.attribute_value,
                result=decide(record, now),
            )
        )

    return AssessmentResponse(
        status=aggregate_status([entry.result for entry in assessment]),
        assessment=assessment,
    )
