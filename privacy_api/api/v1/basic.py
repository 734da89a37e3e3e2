"""Basic-mode endpoints backed by the in-memory consent store."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse

from privacy_api.api.deps import PurposeCatalog, Store, get_client_ip
from privacy_api.api.validation import validate_consents_payload, validate_privacy_request
from privacy_api.core.config import settings
from privacy_api.core.errors import ConsentNotFoundError, RequestValidationFailed
from privacy_api.models.privacy import MessageId
from privacy_api.schemas.privacy import AssessmentResponse, ErrorResponse, MetadataResponse
from privacy_api.services.assessment import assess
from privacy_api.services.metadata import build_page_metadata
from privacy_api.services.recorder import record_consents
from privacy_api.utils.time import epoch_now

router = APIRouter(prefix="/basic", tags=["basic"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {400: {"model": ErrorResponse}}


@router.post(
    "/assessment",
    response_model=AssessmentResponse,
    responses=ERROR_RESPONSES,
)
async def basic_assessment(
    store: Store,
    payload: Annotated[Any, Body()] = None,
) -> AssessmentResponse:
    """Assess whether stored consents approve the requested items."""
    body = validate_privacy_request(payload)
    return assess(store, body.subject_id, body.items)


@router.post(
    "/page_metadata",
    response_model=MetadataResponse,
    responses=ERROR_RESPONSES,
)
async def basic_page_metadata(
    store: Store,
    catalog: PurposeCatalog,
    payload: Annotated[Any, Body()] = None,
) -> MetadataResponse:
    """Get consent presentation metadata for the requested items."""
    body = validate_privacy_request(payload)
    return build_page_metadata(store, catalog, body.subject_id, body.items)


@router.post("/consents", responses=ERROR_RESPONSES)
async def basic_store_consents(
    request: Request,
    store: Store,
    payload: Annotated[Any, Body()] = None,
) -> JSONResponse:
    """Store consent records.

    Responds 200 when every record was stored and 207 when any record
    failed; the body always lists one result per submitted record.
    """
    consents = validate_consents_payload(payload)
    outcome = record_consents(
        store,
        consents,
        path_prefix=f"{settings.api_prefix}/basic",
        client_ip=get_client_ip(request),
        default_duration=settings.default_consent_duration_seconds,
    )
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_body())


@router.get("/consents", responses=ERROR_RESPONSES)
async def basic_list_consents(
    store: Store,
    subject_id: Annotated[str | None, Query(alias="subjectId")] = None,
) -> dict[str, Any]:
    """List every consent stored for a subject."""
    if not subject_id:
        raise RequestValidationFailed(
            "Subject ID is required", MessageId.MISSING_SUBJECT_ID
        )

    now = epoch_now()
    return {
        "consents": [record.to_dict(now) for record in store.list_for_subject(subject_id)]
    }


@router.get("/consents/{consent_id}", responses={404: {"model": ErrorResponse}})
async def basic_get_consent(consent_id: str, store: Store) -> dict[str, Any]:
    """Get a stored consent by id."""
    record = store.get_by_id(consent_id)
    if record is None:
        raise ConsentNotFoundError(consent_id)
    return record.to_dict(epoch_now())
