"""Pydantic schemas for privacy assessment, metadata and consent storage."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from privacy_api.models.privacy import AssessmentStatus, ConsentState


class PrivacyItem(BaseModel):
    """A requested data-access item.

    Either ``purposeId`` (optionally refined by access type and attribute) or
    ``profileId`` identifies what is being asked about. Unknown fields are
    kept so metadata responses can echo the item back unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    purpose_id: str | None = Field(None, alias="purposeId")
    access_type_id: str | None = Field(None, alias="accessTypeId")
    attribute_id: str | None = Field(None, alias="attributeId")
    attribute_value: str | None = Field(None, alias="attributeValue")
    profile_id: str | None = Field(None, alias="profileId")


class PrivacyRequest(BaseModel):
    """Body of assessment and page metadata requests."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    subject_id: str = Field(..., alias="subjectId")
    items: list[PrivacyItem] = Field(..., min_length=1)
    is_external_subject: bool = Field(False, alias="isExternalSubject")
    geo_ip: str | None = Field(None, alias="geoIP")


class ConsentInput(BaseModel):
    """A consent record submitted for storage.

    Only ``subjectId`` and ``purposeId`` are required; everything else is
    defaulted when the record is normalized. A caller-supplied ``status`` is
    ignored because status is always derived from the time bounds.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    subject_id: str = Field(..., min_length=1, alias="subjectId")
    purpose_id: str = Field(..., min_length=1, alias="purposeId")
    access_type_id: str | None = Field(None, alias="accessTypeId")
    attribute_id: str | None = Field(None, alias="attributeId")
    attribute_value: str | None = Field(None, alias="attributeValue")
    start_time: int | None = Field(None, alias="startTime")
    end_time: int | None = Field(None, alias="endTime")
    is_global: bool | None = Field(None, alias="isGlobal")
    state: ConsentState | None = None
    geo_ip: str | None = Field(None, alias="geoIP")
    custom_attributes: dict[str, Any] | None = Field(None, alias="customAttributes")
    is_external_subject: bool | None = Field(None, alias="isExternalSubject")


class DecisionReason(BaseModel):
    """Why an item was not approved."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(..., alias="messageId")
    message_description: str = Field(..., alias="messageDescription")
    extra_info: Any = Field(None, alias="extraInfo")


class Decision(BaseModel):
    """Approval decision for a single item."""

    model_config = ConfigDict(populate_by_name=True)

    approved: bool
    approval_required: bool = Field(..., alias="approvalRequired")
    prompt_for_consent: bool = Field(..., alias="promptForConsent")
    reason: DecisionReason | None = None


class AssessmentItem(BaseModel):
    """Decision for one requested item, echoing the item's identity."""

    model_config = ConfigDict(populate_by_name=True)

    purpose_id: str | None = Field(None, alias="purposeId")
    access_type_id: str | None = Field(None, alias="accessTypeId")
    attribute_id: str | None = Field(None, alias="attributeId")
    attribute_value: str | None = Field(None, alias="attributeValue")
    result: Decision


class AssessmentResponse(BaseModel):
    """Response for an assessment request."""

    status: AssessmentStatus
    assessment: list[AssessmentItem]


class PageMetadata(BaseModel):
    """Metadata partitioned into document and default entries."""

    document: list[dict[str, Any]] = Field(default_factory=list)
    default: list[dict[str, Any]] = Field(default_factory=list)


class MetadataResponse(BaseModel):
    """Response for a page metadata request."""

    metadata: PageMetadata
    unhandled: list[dict[str, Any]] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(..., alias="messageId")
    message_description: str = Field(..., alias="messageDescription")
    extra_info: Any = Field(None, alias="extraInfo")
