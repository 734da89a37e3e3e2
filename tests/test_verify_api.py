"""Tests for the verify-mode endpoints."""

from fastapi.testclient import TestClient

from conftest import FakeTenant, request_json

ASSESSMENT_URL = "/v1.0/verify/assessment"
METADATA_URL = "/v1.0/verify/page_metadata"
CONSENTS_URL = "/v1.0/verify/consents"

UPSTREAM_ASSESSMENT = "/v1.0/privacy/data-usage-approval"
UPSTREAM_METADATA = "/v1.0/privacy/consent-metadata"
UPSTREAM_CONSENTS = "/v1.0/privacy/consents"

PRIVACY_REQUEST = {"subjectId": "u1", "items": [{"purposeId": "marketing"}]}


class TestVerifyAuthentication:
    """Tests for bearer token checks on verify routes."""

    def test_missing_token(self, client: TestClient, tenant: FakeTenant) -> None:
        response = client.post(ASSESSMENT_URL, json=PRIVACY_REQUEST)

        assert response.status_code == 401
        assert response.json()["messageId"] == "UNAUTHORIZED"
        assert tenant.privacy_requests() == []

    def test_non_bearer_scheme(self, client: TestClient) -> None:
        response = client.post(
            ASSESSMENT_URL,
            json=PRIVACY_REQUEST,
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
        )

        assert response.status_code == 401
        assert response.json()["messageId"] == "UNAUTHORIZED"

    def test_inactive_token(self, client: TestClient, tenant: FakeTenant) -> None:
        response = client.post(
            ASSESSMENT_URL,
            json=PRIVACY_REQUEST,
            headers={"Authorization": "Bearer revoked"},
        )

        assert response.status_code == 401
        assert response.json()["messageId"] == "INVALID_TOKEN"
        assert tenant.privacy_requests() == []

    def test_introspection_failure(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        tenant.introspection_status = 503

        response = client.post(ASSESSMENT_URL, json=PRIVACY_REQUEST, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["messageId"] == "AUTH_ERROR"

    def test_token_checked_before_body(self, client: TestClient) -> None:
        response = client.post(ASSESSMENT_URL, json={"items": []})

        assert response.status_code == 401


class TestVerifyAssessment:
    """Tests for POST /verify/assessment."""

    def test_forwards_and_remaps(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        tenant.respond(
            "POST",
            UPSTREAM_ASSESSMENT,
            {
                "status": "approved",
                "assessment": [
                    {
                        "purposeId": "marketing",
                        "result": [
                            {
                                "approved": True,
                                "approvalRequired": False,
                                "promptForConsent": False,
                            }
                        ],
                    }
                ],
            },
        )

        response = client.post(ASSESSMENT_URL, json=PRIVACY_REQUEST, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["assessment"][0]["result"]["approved"] is True

        [request] = tenant.privacy_requests()
        body = request_json(request)
        assert body["subjectId"] == "u1"
        assert body["items"] == [{"purposeId": "marketing"}]

    def test_geo_ip_used_as_context(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        tenant.respond("POST", UPSTREAM_ASSESSMENT, {"status": "approved", "assessment": []})

        client.post(
            ASSESSMENT_URL,
            json={**PRIVACY_REQUEST, "geoIP": "198.51.100.4"},
            headers=auth_headers,
        )

        [request] = tenant.privacy_requests()
        assert request.headers["X-Forwarded-For"] == "198.51.100.4"

    def test_validation_runs_before_forwarding(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        response = client.post(
            ASSESSMENT_URL, json={"subjectId": "u1", "items": []}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["messageId"] == "MISSING_ITEMS"
        assert tenant.privacy_requests() == []

    def test_expired_service_token_retried_once(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        tenant.rejected_tokens.add("service-token-1")
        tenant.respond("POST", UPSTREAM_ASSESSMENT, {"status": "approved", "assessment": []})

        response = client.post(ASSESSMENT_URL, json=PRIVACY_REQUEST, headers=auth_headers)

        assert response.status_code == 200
        assert len(tenant.privacy_requests()) == 2
        assert tenant.issued_tokens == ["service-token-1", "service-token-2"]

    def test_second_rejection_propagates(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        """The request is retried exactly once; the second 401 reaches the caller."""
        tenant.rejected_tokens.update({"service-token-1", "service-token-2"})

        response = client.post(ASSESSMENT_URL, json=PRIVACY_REQUEST, headers=auth_headers)

        assert response.status_code == 401
        assert response.json()["messageId"] == "CSIAH0001E"
        assert len(tenant.privacy_requests()) == 2

    def test_upstream_error_propagates(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        tenant.respond(
            "POST",
            UPSTREAM_ASSESSMENT,
            {
                "messageId": "CSIBH0002E",
                "messageDescription": "Subject not found",
                "extraInfo": {"subjectId": "u1"},
            },
            status_code=404,
        )

        response = client.post(ASSESSMENT_URL, json=PRIVACY_REQUEST, headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {
            "messageId": "CSIBH0002E",
            "messageDescription": "Subject not found",
            "extraInfo": {"subjectId": "u1"},
        }
        assert len(tenant.privacy_requests()) == 1


class TestVerifyPageMetadata:
    """Tests for POST /verify/page_metadata."""

    def test_remaps_metadata(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        tenant.respond(
            "POST",
            UPSTREAM_METADATA,
            {
                "metadata": {
                    "eula": [{"purposeId": "terms-of-service"}],
                    "default": [
                        {
                            "purposeId": "marketing",
                            "consentType": 4,
                            "consent": {"state": 1, "status": 1},
                        }
                    ],
                },
                "unhandled": [],
            },
        )

        response = client.post(
            METADATA_URL,
            json=PRIVACY_REQUEST,
            headers={**auth_headers, "Accept-Language": "de"},
        )

        assert response.status_code == 200
        metadata = response.json()["metadata"]
        assert metadata["document"] == [{"purposeId": "terms-of-service"}]
        default = metadata["default"][0]
        assert default["consentType"] == "allow_or_deny"
        assert default["consent"] == {"state": "allow", "status": "active"}

        [request] = tenant.privacy_requests()
        assert request.headers["Accept-Language"] == "de"


class TestVerifyStoreConsents:
    """Tests for POST /verify/consents."""

    def test_all_stored(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        tenant.respond(
            "PATCH",
            UPSTREAM_CONSENTS,
            {
                "status": "success",
                "results": [
                    {
                        "op": "add",
                        "result": "success",
                        "value": {"purposeId": "marketing", "state": 1},
                    }
                ],
            },
        )

        response = client.post(
            CONSENTS_URL,
            json=[{"subjectId": "u1", "purposeId": "marketing", "state": "allow"}],
            headers=auth_headers,
        )

        assert response.status_code == 200
        [result] = response.json()["results"]
        assert result == {
            "result": "success",
            "consent": {"purposeId": "marketing", "state": "allow"},
        }

    def test_partial_failure_is_multistatus(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        tenant.respond(
            "PATCH",
            UPSTREAM_CONSENTS,
            {
                "status": "partial",
                "results": [
                    {"op": "add", "result": "success", "value": {"state": 2}},
                    {"op": "add", "result": "failure", "error": "CSIBT0024E Unknown purpose"},
                ],
            },
        )

        response = client.post(
            CONSENTS_URL,
            json=[
                {"subjectId": "u1", "purposeId": "marketing", "state": "deny"},
                {"subjectId": "u1", "purposeId": "nope"},
            ],
            headers=auth_headers,
        )

        assert response.status_code == 207
        results = response.json()["results"]
        assert results[1]["error"]["messageId"] == "CSIBT0024E"

    def test_invalid_record_rejected_before_forwarding(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        response = client.post(
            CONSENTS_URL,
            json=[
                {"subjectId": "u1", "purposeId": "marketing"},
                {"subjectId": "u1"},
            ],
            headers=auth_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["messageId"] == "MISSING_PURPOSE_ID"
        assert "index 1" in body["messageDescription"]
        assert tenant.privacy_requests() == []

    def test_unknown_state_rejected(
        self, client: TestClient, tenant: FakeTenant, auth_headers: dict
    ) -> None:
        response = client.post(
            CONSENTS_URL,
            json=[{"subjectId": "u1", "purposeId": "marketing", "state": "maybe"}],
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["messageId"] == "INVALID_REQUEST"
