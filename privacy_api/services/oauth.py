"""OAuth client for the consent-management tenant.

Covers the two token operations the service needs: obtaining its own
access token with the client-credentials grant, and introspecting bearer
tokens presented by callers of the verify endpoints.
"""

import logging
from typing import Any

import httpx
from fastapi import status

from privacy_api.core.errors import PrivacyAPIError
from privacy_api.models.privacy import MessageId

logger = logging.getLogger(__name__)


class TokenAcquisitionError(PrivacyAPIError):
    """Raised when the client-credentials token cannot be obtained."""

    def __init__(self, message: str) -> None:
        super().__init__(
            f"Failed to get OAuth token: {message}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message_id=MessageId.PRIVACY_API_ERROR,
        )


class IntrospectionError(PrivacyAPIError):
    """Raised when a bearer token cannot be introspected."""

    def __init__(self, message: str) -> None:
        super().__init__(
            f"Failed to introspect token: {message}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message_id=MessageId.AUTH_ERROR,
        )


class OAuthClient:
    """Token endpoint operations against the tenant."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        client_id: str,
        client_secret: str,
    ) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret

    async def fetch_access_token(self) -> str:
        """Obtain an access token with the client-credentials grant.

        Returns:
            The access token

        Raises:
            TokenAcquisitionError: If the token endpoint fails or returns no token
        """
        try:
            response = await self.http.post(
                f"{self.base_url}/oauth2/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
            )
        except httpx.HTTPError as exc:
            logger.error(f"Error getting OAuth token: {exc}")
            raise TokenAcquisitionError(str(exc)) from exc

        if response.status_code != 200:
            logger.error(
                f"Error getting OAuth token: status={response.status_code} "
                f"body={response.text[:200]}"
            )
            raise TokenAcquisitionError(
                f"token endpoint returned {response.status_code}"
            )

        try:
            access_token = response.json().get("access_token")
        except ValueError as exc:
            raise TokenAcquisitionError("token endpoint returned invalid JSON") from exc

        if not access_token:
            raise TokenAcquisitionError("no access_token in response")

        return access_token

    async def introspect(self, token: str) -> dict[str, Any]:
        """Introspect a bearer token.

        Args:
            token: Bearer token presented by a caller

        Returns:
            Introspection response (``active`` tells whether the token is valid)

        Raises:
            IntrospectionError: If the introspection endpoint cannot be used
        """
        try:
            response = await self.http.post(
                f"{self.base_url}/oauth2/introspect",
                data={"token": token},
                auth=(self.client_id, self.client_secret),
            )
        except httpx.HTTPError as exc:
            logger.error(f"Error introspecting token: {exc}")
            raise IntrospectionError(str(exc)) from exc

        if response.status_code != 200:
            logger.error(
                f"Error introspecting token: status={response.status_code} "
                f"body={response.text[:200]}"
            )
            raise IntrospectionError(
                f"introspection endpoint returned {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise IntrospectionError("introspection endpoint returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise IntrospectionError("introspection endpoint returned invalid JSON")

        return payload


class TokenProvider:
    """Caches the service's access token and refreshes it on demand."""

    def __init__(self, oauth: OAuthClient) -> None:
        self.oauth = oauth
        self._access_token: str | None = None

    async def get_token(self, force_refresh: bool = False) -> str:
        """Return the cached token, fetching a new one when needed."""
        if self._access_token is None or force_refresh:
            self._access_token = await self.oauth.fetch_access_token()
            logger.info("Obtained new access token for the privacy service")
        return self._access_token
