"""Consent record held by the consent store."""

from dataclasses import dataclass, field
from typing import Any

from privacy_api.models.privacy import ConsentState, ConsentStatus

# Default consent lifetime: one year in seconds
DEFAULT_CONSENT_DURATION_SECONDS = 31_536_000


def consent_key(
    subject_id: str,
    purpose_id: str | None,
    access_type_id: str | None = None,
    attribute_id: str | None = None,
    attribute_value: str | None = None,
) -> tuple[str, str, str, str, str]:
    """Build the composite key identifying a consent.

    Absent optional parts are replaced by the empty string, so a key built
    from a request item always matches the key of the record it refers to.
    """
    return (
        subject_id,
        purpose_id or "",
        access_type_id or "",
        attribute_id or "",
        attribute_value or "",
    )


@dataclass
class ConsentRecord:
    """A recorded consent for one subject and purpose refinement.

    Attributes:
        id: Opaque record identifier
        subject_id: Data subject the consent belongs to
        purpose_id: Purpose the consent applies to
        access_type_id: Optional access type refining the purpose
        attribute_id: Optional attribute refining the purpose
        attribute_value: Optional attribute value refining the purpose
        start_time: Epoch seconds the consent becomes active
        end_time: Epoch seconds the consent stops being active
        state: Disposition recorded by the subject
        is_global: Whether the consent applies across applications
        geo_ip: IP address the consent was given from
        custom_attributes: Arbitrary caller-supplied attributes
        is_external_subject: Whether the subject is managed externally
    """

    id: str
    subject_id: str
    purpose_id: str
    start_time: int
    end_time: int
    state: ConsentState = ConsentState.ALLOW
    access_type_id: str | None = None
    attribute_id: str | None = None
    attribute_value: str | None = None
    is_global: bool = False
    geo_ip: str | None = None
    custom_attributes: dict[str, Any] = field(default_factory=dict)
    is_external_subject: bool = False

    @property
    def key(self) -> tuple[str, str, str, str, str]:
        return consent_key(
            self.subject_id,
            self.purpose_id,
            self.access_type_id,
            self.attribute_id,
            self.attribute_value,
        )

    def status_at(self, now: int) -> ConsentStatus:
        """Derive the consent status at the given time.

        Bounds are inclusive: a consent is active from its start second up to
        and including its end second.
        """
        if self.start_time <= now <= self.end_time:
            return ConsentStatus.ACTIVE
        if now < self.start_time:
            return ConsentStatus.FUTURE
        return ConsentStatus.EXPIRED

    def overlay(self) -> dict[str, Any]:
        """Display fields shown alongside catalog metadata (no status)."""
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "isGlobal": self.is_global,
            "state": self.state.value,
            "geoIP": self.geo_ip,
            "customAttributes": dict(self.custom_attributes),
            "subjectId": self.subject_id,
            "isExternalSubject": self.is_external_subject,
        }

    def to_dict(self, now: int) -> dict[str, Any]:
        """Serialize the record with its status derived at ``now``."""
        return {
            "id": self.id,
            "purposeId": self.purpose_id,
            "accessTypeId": self.access_type_id,
            "attributeId": self.attribute_id,
            "attributeValue": self.attribute_value,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "isGlobal": self.is_global,
            "status": self.status_at(now).value,
            "state": self.state.value,
            "geoIP": self.geo_ip,
            "customAttributes": dict(self.custom_attributes),
            "subjectId": self.subject_id,
            "isExternalSubject": self.is_external_subject,
        }

    def __repr__(self) -> str:
        return f"<ConsentRecord {self.id} subject={self.subject_id} purpose={self.purpose_id}>"
