"""API v1 router aggregating the privacy endpoints."""

from fastapi import APIRouter

from privacy_api.api.v1 import basic, verify

api_router = APIRouter()

# Basic mode (in-memory store)
api_router.include_router(basic.router)

# Verify mode (delegated to the consent-management service)
api_router.include_router(verify.router)
