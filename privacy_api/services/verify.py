"""Adapter for the delegated consent-management service (verify mode).

Requests are forwarded to the tenant's privacy API with the service's own
access token. Responses come back with integer-coded enumerations and a
few differently named fields; they are rewritten here into the same shapes
the basic endpoints return.
"""

import logging
from collections.abc import Awaitable, Callable
from copy import deepcopy
from typing import Any, TypeVar

import httpx
from fastapi import status

from privacy_api.core.config import Settings
from privacy_api.core.errors import PrivacyAPIError
from privacy_api.models.privacy import (
    ConsentDisplayType,
    ConsentState,
    ConsentStatus,
    MessageId,
    StoreResult,
)
from privacy_api.services.oauth import OAuthClient, TokenProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Integer codes used by the privacy service
CONSENT_STATE_CODES: dict[str, int] = {
    ConsentState.ALLOW.value: 1,
    ConsentState.DENY.value: 2,
    ConsentState.OPT_IN.value: 3,
    ConsentState.OPT_OUT.value: 4,
    ConsentState.TRANSPARENT.value: 5,
}

CONSENT_STATES_BY_CODE: dict[int, str] = {
    code: state for state, code in CONSENT_STATE_CODES.items()
}

DISPLAY_TYPES_BY_CODE: dict[int, str] = {
    1: ConsentDisplayType.DO_NOT_SHOW.value,
    2: ConsentDisplayType.TRANSPARENT.value,
    3: ConsentDisplayType.OPT_IN_OR_OUT.value,
    4: ConsentDisplayType.ALLOW_OR_DENY.value,
}

CONSENT_STATUSES_BY_CODE: dict[int, str] = {
    1: ConsentStatus.ACTIVE.value,
    2: ConsentStatus.EXPIRED.value,
    3: ConsentStatus.FUTURE.value,
    8: ConsentStatus.NONE.value,
}

# Prefix of error codes in store results ("CSIxxxx description")
STORE_ERROR_CODE_PREFIX = "CS"


class UpstreamError(PrivacyAPIError):
    """Raised when the privacy service rejects or fails a request."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        message_id: MessageId | str | None = None,
        extra_info: Any = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            message_id=message_id or MessageId.PRIVACY_API_ERROR,
            extra_info=extra_info,
        )


async def call_with_token_refresh(
    tokens: TokenProvider,
    operation: Callable[[str], Awaitable[T]],
) -> T:
    """Run an operation, refreshing the token and retrying once on a 401.

    The first attempt uses the cached token. If the service answers 401 the
    token is refreshed and the operation runs exactly once more; whatever
    the second attempt raises is propagated. Any other failure propagates
    immediately.
    """
    token = await tokens.get_token()
    try:
        return await operation(token)
    except UpstreamError as exc:
        if exc.status_code != status.HTTP_401_UNAUTHORIZED:
            logger.error(f"Privacy API error: {exc.message_id} {exc.message}")
            raise

    logger.info("Access token expired, refreshing")
    token = await tokens.get_token(force_refresh=True)
    try:
        return await operation(token)
    except UpstreamError as exc:
        logger.error(f"Retry failed after token refresh: {exc.message_id} {exc.message}")
        raise


def _lookup(table: dict[int, str], code: Any) -> Any:
    if isinstance(code, str) and not code.isdigit():
        # Already a string value
        return code
    try:
        return table.get(int(code))
    except (TypeError, ValueError):
        return None


def split_error_message(error: str) -> dict[str, str]:
    """Split ``"<CODE> <description>"`` into message id and description.

    Only strings starting with the service's error code prefix carry a code;
    anything else is reported with message id ``unknown``.
    """
    if not error.startswith(STORE_ERROR_CODE_PREFIX):
        return {"messageId": "unknown", "messageDescription": error}

    code, _, description = error.partition(" ")
    return {"messageId": code, "messageDescription": description}


def remap_assessment(response: dict[str, Any]) -> dict[str, Any]:
    """Collapse each item's result list to its first decision."""
    response = deepcopy(response)
    for item in response.get("assessment") or []:
        result = item.get("result")
        if isinstance(result, list) and result:
            item["result"] = result[0]
    return response


def remap_metadata(response: dict[str, Any]) -> dict[str, Any]:
    """Rename ``eula`` to ``document`` and decode enumerations."""
    response = deepcopy(response)
    metadata = response.get("metadata")
    if not isinstance(metadata, dict):
        return response

    if "eula" in metadata:
        metadata["document"] = metadata.pop("eula")

    for item in metadata.get("default") or []:
        if "consentType" in item:
            item["consentType"] = _lookup(DISPLAY_TYPES_BY_CODE, item["consentType"])
        consent = item.get("consent")
        if consent:
            if "state" in consent:
                consent["state"] = _lookup(CONSENT_STATES_BY_CODE, consent["state"])
            if "status" in consent:
                consent["status"] = _lookup(CONSENT_STATUSES_BY_CODE, consent["status"])

    return response


def remap_store_response(response: dict[str, Any]) -> dict[str, Any]:
    """Rewrite store results into ``{result, consent?, error?}`` entries."""
    response = deepcopy(response)
    for result in response.get("results") or []:
        value = result.pop("value", None)
        if value:
            if "state" in value:
                value["state"] = _lookup(CONSENT_STATES_BY_CODE, value["state"])
            result["consent"] = value

        result.pop("op", None)

        error = result.get("error")
        if isinstance(error, str):
            if error:
                result["error"] = split_error_message(error)
            else:
                del result["error"]

    return response


def store_has_failures(response: dict[str, Any]) -> bool:
    """Whether a remapped store response reports any failure."""
    if response.get("status") == "error":
        return True
    return any(
        result.get("result") == StoreResult.FAILURE.value
        for result in response.get("results") or []
    )


def prepare_consents(
    consents: list[dict[str, Any]],
    client_ip: str | None,
) -> tuple[list[dict[str, Any]], str | None]:
    """Encode consents for the privacy service.

    States are sent as integer codes and every consent is stored as global.
    The last non-empty ``geoIP`` among the consents replaces the caller's IP
    as the request context.

    Returns:
        Tuple of (encoded consents, context IP)
    """
    prepared = []
    for consent in consents:
        encoded = dict(consent)
        if encoded.get("state") is not None:
            encoded["state"] = CONSENT_STATE_CODES.get(encoded["state"])
        if encoded.get("geoIP"):
            client_ip = encoded["geoIP"]
        encoded["isGlobal"] = True
        encoded.setdefault("isExternalSubject", False)
        prepared.append(encoded)
    return prepared, client_ip


def _error_from_response(response: httpx.Response) -> UpstreamError:
    message_id = None
    description = None
    extra_info = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message_id = body.get("messageId")
        description = body.get("messageDescription") or body.get("message")
        extra_info = body.get("extraInfo")

    return UpstreamError(
        description or response.text[:200] or "Error communicating with Privacy service",
        status_code=response.status_code,
        message_id=message_id,
        extra_info=extra_info,
    )


class VerifyPrivacyClient:
    """Client for the tenant's privacy API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        tokens: TokenProvider,
        base_url: str,
        assessment_path: str = "/v1.0/privacy/data-usage-approval",
        metadata_path: str = "/v1.0/privacy/consent-metadata",
        consents_path: str = "/v1.0/privacy/consents",
    ) -> None:
        self.http = http
        self.tokens = tokens
        self.base_url = base_url.rstrip("/")
        self.assessment_path = assessment_path
        self.metadata_path = metadata_path
        self.consents_path = consents_path

    async def _send(
        self,
        method: str,
        path: str,
        token: str,
        body: Any,
        client_ip: str | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        if client_ip:
            headers["X-Forwarded-For"] = client_ip
        if extra_headers:
            headers.update(extra_headers)

        try:
            response = await self.http.request(
                method, f"{self.base_url}{path}", json=body, headers=headers
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Error communicating with Privacy service: {exc}") from exc

        if response.status_code >= 400:
            raise _error_from_response(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("Privacy service returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise UpstreamError("Privacy service returned an unexpected response")
        return payload

    async def assess(
        self,
        subject_id: str,
        items: list[dict[str, Any]],
        is_external_subject: bool = False,
        client_ip: str | None = None,
    ) -> dict[str, Any]:
        """Request data-usage approval for a subject's items."""
        body = {
            "subjectId": subject_id,
            "isExternalSubject": is_external_subject,
            "geoIP": client_ip,
            "trace": False,
            "items": items,
        }

        async def operation(token: str) -> dict[str, Any]:
            response = await self._send("POST", self.assessment_path, token, body, client_ip)
            return remap_assessment(response)

        response = await call_with_token_refresh(self.tokens, operation)
        logger.debug(f"Assessment response: {response}")
        return response

    async def get_consent_metadata(
        self,
        subject_id: str,
        items: list[dict[str, Any]],
        is_external_subject: bool = False,
        client_ip: str | None = None,
        accept_language: str | None = None,
    ) -> dict[str, Any]:
        """Fetch consent presentation metadata for a subject's items."""
        body = {
            "subjectId": subject_id,
            "isExternalSubject": is_external_subject,
            "geoIP": client_ip,
            "items": items,
        }
        extra_headers = {"Accept-Language": accept_language} if accept_language else None

        async def operation(token: str) -> dict[str, Any]:
            response = await self._send(
                "POST", self.metadata_path, token, body, client_ip, extra_headers
            )
            return remap_metadata(response)

        return await call_with_token_refresh(self.tokens, operation)

    async def store_consents(
        self,
        consents: list[dict[str, Any]],
        client_ip: str | None = None,
    ) -> dict[str, Any]:
        """Store consents, returning the remapped per-record results."""
        prepared, context_ip = prepare_consents(consents, client_ip)
        body = [{"op": "add", "value": consent} for consent in prepared]

        async def operation(token: str) -> dict[str, Any]:
            response = await self._send("PATCH", self.consents_path, token, body, context_ip)
            return remap_store_response(response)

        response = await call_with_token_refresh(self.tokens, operation)
        logger.debug(f"Store consents response: {response}")
        return response


def build_verify_client(
    settings: Settings, http: httpx.AsyncClient
) -> tuple[OAuthClient, VerifyPrivacyClient]:
    """Wire the OAuth and privacy clients for the configured tenant."""
    oauth = OAuthClient(
        http,
        settings.verify_base_url,
        settings.verify_client_id,
        settings.verify_client_secret,
    )
    client = VerifyPrivacyClient(
        http,
        TokenProvider(oauth),
        settings.verify_base_url,
        assessment_path=settings.verify_assessment_path,
        metadata_path=settings.verify_metadata_path,
        consents_path=settings.verify_consents_path,
    )
    return oauth, client
