"""Pytest configuration and fixtures."""

import json
from collections.abc import Callable, Generator
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient

from privacy_api.api.deps import get_consent_store, get_oauth_client, get_verify_client
from privacy_api.main import app
from privacy_api.models.consent import ConsentRecord
from privacy_api.models.privacy import ConsentState
from privacy_api.services.oauth import OAuthClient, TokenProvider
from privacy_api.services.store import ConsentStore
from privacy_api.services.verify import VerifyPrivacyClient

TENANT_URL = "https://tenant.example.test"

# Bearer token accepted by the fake tenant's introspection endpoint
CALLER_TOKEN = "caller-token"

NOW = 1_700_000_000


class FakeTenant:
    """In-process stand-in for the consent-management tenant.

    Serves the OAuth token and introspection endpoints and any privacy API
    routes registered in ``routes``. Service tokens listed in
    ``rejected_tokens`` get a 401 from the privacy API.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.issued_tokens: list[str] = []
        self.active_tokens: set[str] = {CALLER_TOKEN}
        self.rejected_tokens: set[str] = set()
        self.introspection_status = 200
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def respond(self, method: str, path: str, body: Any, status_code: int = 200) -> None:
        """Register a canned JSON response for a privacy API route."""
        self.routes[(method, path)] = lambda request: httpx.Response(status_code, json=body)

    def privacy_requests(self) -> list[httpx.Request]:
        """Requests sent to the privacy API (not the OAuth endpoints)."""
        return [r for r in self.requests if not r.url.path.startswith("/oauth2/")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/oauth2/token":
            token = f"service-token-{len(self.issued_tokens) + 1}"
            self.issued_tokens.append(token)
            return httpx.Response(200, json={"access_token": token, "token_type": "bearer"})

        if path == "/oauth2/introspect":
            if self.introspection_status != 200:
                return httpx.Response(self.introspection_status, json={})
            form = parse_qs(request.content.decode())
            token = form.get("token", [""])[0]
            return httpx.Response(200, json={"active": token in self.active_tokens})

        bearer = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if bearer in self.rejected_tokens:
            return httpx.Response(
                401,
                json={"messageId": "CSIAH0001E", "messageDescription": "Token expired"},
            )

        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"messageDescription": f"No route {path}"})
        return route(request)


def request_json(request: httpx.Request) -> Any:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content)


def make_record(
    subject_id: str = "u1",
    purpose_id: str = "terms-of-service",
    state: ConsentState = ConsentState.ALLOW,
    start_time: int = NOW - 100,
    end_time: int = NOW + 100,
    **kwargs: Any,
) -> ConsentRecord:
    """Build a consent record with sensible defaults."""
    return ConsentRecord(
        id=kwargs.pop("id", f"consent-{subject_id}-{purpose_id}"),
        subject_id=subject_id,
        purpose_id=purpose_id,
        state=state,
        start_time=start_time,
        end_time=end_time,
        **kwargs,
    )


@pytest.fixture
def store() -> ConsentStore:
    """Create an empty consent store."""
    return ConsentStore()


@pytest.fixture
def tenant() -> FakeTenant:
    """Create a fake consent-management tenant."""
    return FakeTenant()


@pytest.fixture
def tenant_http(tenant: FakeTenant) -> httpx.AsyncClient:
    """HTTP client whose requests are served by the fake tenant."""
    return httpx.AsyncClient(transport=httpx.MockTransport(tenant.handler))


@pytest.fixture
def oauth_client(tenant_http: httpx.AsyncClient) -> OAuthClient:
    """OAuth client pointed at the fake tenant."""
    return OAuthClient(tenant_http, TENANT_URL, "client-id", "client-secret")


@pytest.fixture
def verify_client(
    tenant_http: httpx.AsyncClient, oauth_client: OAuthClient
) -> VerifyPrivacyClient:
    """Privacy service client pointed at the fake tenant."""
    return VerifyPrivacyClient(tenant_http, TokenProvider(oauth_client), TENANT_URL)


@pytest.fixture
def client(
    store: ConsentStore,
    oauth_client: OAuthClient,
    verify_client: VerifyPrivacyClient,
) -> Generator[TestClient, None, None]:
    """Create FastAPI test client with overridden dependencies."""
    app.dependency_overrides[get_consent_store] = lambda: store
    app.dependency_overrides[get_oauth_client] = lambda: oauth_client
    app.dependency_overrides[get_verify_client] = lambda: verify_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authorization headers carrying a token the tenant considers active."""
    return {"Authorization": f"Bearer {CALLER_TOKEN}"}
