"""FastAPI dependency injection utilities."""

import logging
from typing import Annotated, Any

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from privacy_api.catalog.loader import Catalog, get_catalog
from privacy_api.core.config import settings
from privacy_api.core.errors import PrivacyAPIError
from privacy_api.models.privacy import MessageId
from privacy_api.services.oauth import OAuthClient
from privacy_api.services.store import ConsentStore
from privacy_api.services.verify import VerifyPrivacyClient

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


def get_consent_store(request: Request) -> ConsentStore:
    """Get the application's consent store."""
    return request.app.state.consent_store


def get_purpose_catalog() -> Catalog:
    """Get the configured purpose catalog."""
    return get_catalog(settings.catalog_path)


def get_oauth_client(request: Request) -> OAuthClient:
    """Get the OAuth client for the consent-management tenant."""
    return request.app.state.oauth_client


def get_verify_client(request: Request) -> VerifyPrivacyClient:
    """Get the privacy service client for verify mode."""
    return request.app.state.verify_client


async def require_access_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    oauth: Annotated[OAuthClient, Depends(get_oauth_client)],
) -> dict[str, Any]:
    """Require an active bearer token on the request.

    Args:
        credentials: Bearer token credentials
        oauth: Client used to introspect the token

    Returns:
        Introspection response for the token

    Raises:
        PrivacyAPIError: 401 if the token is missing or inactive, 500 if it
            cannot be introspected
    """
    if not credentials or not credentials.credentials:
        raise PrivacyAPIError(
            "Authorization header with Bearer token is required",
            status_code=status.HTTP_401_UNAUTHORIZED,
            message_id=MessageId.UNAUTHORIZED,
        )

    introspection = await oauth.introspect(credentials.credentials)

    if not introspection.get("active"):
        logger.warning("Rejected inactive bearer token")
        raise PrivacyAPIError(
            "Invalid or expired token",
            status_code=status.HTTP_401_UNAUTHORIZED,
            message_id=MessageId.INVALID_TOKEN,
        )

    return introspection


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from request.

    Args:
        request: FastAPI request

    Returns:
        Client IP address or None
    """
    # Check for forwarded header (when behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    # Fall back to direct client
    if request.client:
        return request.client.host

    return None


# Type aliases for cleaner dependency injection
Store = Annotated[ConsentStore, Depends(get_consent_store)]
PurposeCatalog = Annotated[Catalog, Depends(get_purpose_catalog)]
VerifyClient = Annotated[VerifyPrivacyClient, Depends(get_verify_client)]
