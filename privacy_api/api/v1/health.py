"""Liveness and readiness probes."""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from privacy_api.api.deps import Store, get_purpose_catalog
from privacy_api.catalog.loader import CatalogError

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    """Readiness with the sizes of the data the basic endpoints serve from."""

    status: str
    documents: int = 0
    purposes: int = 0
    consents: int = 0


@router.get("", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
    summary="Readiness probe",
)
async def readiness_check(store: Store) -> ReadinessResponse | JSONResponse:
    """Ready once the purpose catalog loads; 503 while it cannot."""
    try:
        catalog = get_purpose_catalog()
    except CatalogError as exc:
        logger.error(f"Catalog unavailable: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ReadinessResponse(status="unavailable").model_dump(),
        )

    return ReadinessResponse(
        status="ok",
        documents=len(catalog.documents),
        purposes=len(catalog.purposes),
        consents=len(store),
    )
