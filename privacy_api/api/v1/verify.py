"""Verify-mode endpoints delegated to the consent-management service.

Every route requires an active bearer token, checked by introspection
against the tenant before the request is forwarded.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from privacy_api.api.deps import VerifyClient, get_client_ip, require_access_token
from privacy_api.api.validation import validate_privacy_request, validate_verify_consents
from privacy_api.schemas.privacy import ErrorResponse
from privacy_api.services.verify import store_has_failures

router = APIRouter(
    prefix="/verify",
    tags=["verify"],
    dependencies=[Depends(require_access_token)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("/assessment")
async def verify_assessment(
    request: Request,
    client: VerifyClient,
    payload: Annotated[Any, Body()] = None,
) -> dict[str, Any]:
    """Assess the requested items with the privacy service."""
    body = validate_privacy_request(payload)
    items = [item.model_dump(by_alias=True, exclude_unset=True) for item in body.items]

    return await client.assess(
        body.subject_id,
        items,
        is_external_subject=body.is_external_subject,
        client_ip=body.geo_ip or get_client_ip(request),
    )


@router.post("/page_metadata")
async def verify_page_metadata(
    request: Request,
    client: VerifyClient,
    payload: Annotated[Any, Body()] = None,
) -> dict[str, Any]:
    """Get consent presentation metadata from the privacy service."""
    body = validate_privacy_request(payload)
    items = [item.model_dump(by_alias=True, exclude_unset=True) for item in body.items]

    return await client.get_consent_metadata(
        body.subject_id,
        items,
        is_external_subject=body.is_external_subject,
        client_ip=body.geo_ip or get_client_ip(request),
        accept_language=request.headers.get("Accept-Language"),
    )


@router.post("/consents")
async def verify_store_consents(
    request: Request,
    client: VerifyClient,
    payload: Annotated[Any, Body()] = None,
) -> JSONResponse:
    """Store consents with the privacy service (207 on partial failure)."""
    consents = validate_verify_consents(payload)
    response = await client.store_consents(consents, client_ip=get_client_ip(request))

    status_code = (
        status.HTTP_207_MULTI_STATUS
        if store_has_failures(response)
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=status_code, content=response)
