"""HTTP-level tests for the provisioning and bootstrap endpoints.

Services are wired to the in-memory doubles through dependency overrides;
authentication runs for real against locally minted tokens.
"""

from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.schoolops.api.dependencies import (
    get_bootstrap_service,
    get_bulk_import_service,
    get_invite_service,
    get_records_service,
    get_school_service,
)
from src.schoolops.main import create_app
from tests.helpers import auth_header, create_access_token

pytestmark = pytest.mark.unit

BULK_IMPORT_URL = "/api/v1/provisioning/bulk-import"


@pytest.fixture
def app(services) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_bulk_import_service] = lambda: services.bulk_import
    app.dependency_overrides[get_invite_service] = lambda: services.invite
    app.dependency_overrides[get_school_service] = lambda: services.school
    app.dependency_overrides[get_bootstrap_service] = lambda: services.bootstrap
    app.dependency_overrides[get_records_service] = lambda: services.records
    return app


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def tenant(store):
    return store.add_tenant("greenwood")


@pytest.fixture
def auth_headers(store, tenant, actor_id) -> dict[str, str]:
    """Bearer token for a principal of the tenant."""
    store.grant(tenant.id, actor_id, "principal")
    return auth_header(actor_id, email="op@school.test")


def bulk_body(mode="dry_run", rows=None, **extra):
    body = {
        "mode": mode,
        "tenantSlug": "greenwood",
        "rows": rows
        if rows is not None
        else [
            {
                "email": "a@school.test",
                "password": "password123",
                "roles": ["teacher"],
                "displayName": "Alice",
            }
        ],
    }
    body.update(extra)
    return body


class TestAuthentication:
    async def test_missing_token(self, client):
        response = await client.post(BULK_IMPORT_URL, json=bulk_body())

        assert response.status_code == 401
        data = response.json()
        assert data["ok"] is False
        assert data["error"] == "Unauthorized"
        assert data["request_id"]

    async def test_invalid_token(self, client):
        response = await client.post(
            BULK_IMPORT_URL, json=bulk_body(), headers={"Authorization": "Bearer nope"}
        )

        assert response.status_code == 401

    async def test_token_without_uuid_subject(self, client):
        token = create_access_token("not-a-uuid")

        response = await client.post(
            BULK_IMPORT_URL, json=bulk_body(), headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401


class TestBulkImport:
    async def test_dry_run_response_shape(self, client, auth_headers, provider):
        response = await client.post(BULK_IMPORT_URL, json=bulk_body(), headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["mode"] == "dry_run"
        assert data["traceId"] == response.headers["X-Request-ID"]
        assert "error" not in data
        assert data["results"] == [
            {
                "rowNumber": 2,
                "email": "a@school.test",
                "ok": True,
                "errors": [],
                "normalizedRoles": ["teacher"],
            }
        ]
        assert provider.list_calls == []

    async def test_school_slug_alias(self, client, auth_headers):
        body = bulk_body()
        body["schoolSlug"] = body.pop("tenantSlug")

        response = await client.post(BULK_IMPORT_URL, json=body, headers=auth_headers)

        assert response.status_code == 200

    async def test_commit_returns_user_ids(self, client, auth_headers, provider):
        response = await client.post(
            BULK_IMPORT_URL, json=bulk_body(mode="commit"), headers=auth_headers
        )

        assert response.status_code == 200
        result = response.json()["results"][0]
        assert result["userId"] == str(provider.user_id("a@school.test"))

    async def test_row_errors_keep_status_200(self, client, auth_headers):
        rows = [{"email": "bad", "password": "x", "roles": "teacher"}]

        response = await client.post(
            BULK_IMPORT_URL, json=bulk_body(rows=rows), headers=auth_headers
        )

        assert response.status_code == 200
        result = response.json()["results"][0]
        assert result["ok"] is False
        assert result["errors"] == [
            "Invalid email",
            "Password must be at least 8 characters",
            "Missing role(s)",
        ]

    async def test_validation_gate_is_400_with_results(self, client, auth_headers, store):
        rows = [{"email": "a@school.test", "password": "password123", "roles": ["wizard"]}]

        response = await client.post(
            BULK_IMPORT_URL, json=bulk_body(mode="commit", rows=rows), headers=auth_headers
        )

        assert response.status_code == 400
        data = response.json()
        assert data["ok"] is False
        assert data["error"] == "Fix validation errors before committing"
        assert data["results"][0]["errors"] == ["Invalid role: wizard"]
        assert data["traceId"]
        assert store.audit_logs == []

    @pytest.mark.parametrize(
        ("body", "error"),
        [
            (bulk_body(mode="apply"), "Invalid mode"),
            (bulk_body(tenantSlug="***"), "Invalid tenantSlug"),
            (bulk_body(rows=[]), "rows is required"),
            (bulk_body(tenantSlug="nowhere"), "School not found"),
        ],
    )
    async def test_malformed_batch(self, client, auth_headers, body, error):
        response = await client.post(BULK_IMPORT_URL, json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == error

    async def test_too_many_rows(self, client, auth_headers):
        row = {"email": "a@school.test", "password": "password123", "roles": ["teacher"]}

        response = await client.post(
            BULK_IMPORT_URL, json=bulk_body(rows=[row] * 501), headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Too many rows (max 500)"

    async def test_too_many_malformed_rows(self, client, auth_headers):
        response = await client.post(
            BULK_IMPORT_URL, json=bulk_body(rows=[None] * 501), headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Too many rows (max 500)"

    async def test_forbidden(self, client, store, tenant):
        teacher_id = uuid4()
        store.grant(tenant.id, teacher_id, "teacher")
        headers = auth_header(teacher_id)

        response = await client.post(BULK_IMPORT_URL, json=bulk_body(), headers=headers)

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    async def test_api_responses_are_not_cached(self, client, auth_headers):
        response = await client.post(BULK_IMPORT_URL, json=bulk_body(), headers=auth_headers)

        assert response.headers["Cache-Control"] == "no-store"
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestInvite:
    async def test_invite(self, client, auth_headers, provider):
        response = await client.post(
            "/api/v1/provisioning/invite",
            json={
                "tenantSlug": "greenwood",
                "email": "new@school.test",
                "password": "password123",
                "role": "teacher",
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["userId"] == str(provider.user_id("new@school.test"))

    async def test_missing_field_is_400(self, client, auth_headers):
        response = await client.post(
            "/api/v1/provisioning/invite",
            json={"tenantSlug": "greenwood", "email": "new@school.test"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["ok"] is False

    async def test_row_errors_are_joined(self, client, auth_headers):
        response = await client.post(
            "/api/v1/provisioning/invite",
            json={
                "tenantSlug": "greenwood",
                "email": "new@school.test",
                "password": "short",
                "role": "wizard",
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == (
            "Password must be at least 8 characters; Invalid role: wizard"
        )


class TestRecords:
    async def test_directory_after_commit(self, client, auth_headers):
        await client.post(BULK_IMPORT_URL, json=bulk_body(mode="commit"), headers=auth_headers)

        response = await client.get(
            "/api/v1/provisioning/tenants/greenwood/directory", headers=auth_headers
        )

        assert response.status_code == 200
        items = response.json()["items"]
        assert [(i["email"], i["displayName"], i["roles"]) for i in items] == [
            ("a@school.test", "Alice", ["teacher"])
        ]

    async def test_audit_logs_after_commit(self, client, auth_headers):
        await client.post(BULK_IMPORT_URL, json=bulk_body(mode="commit"), headers=auth_headers)

        response = await client.get(
            "/api/v1/provisioning/tenants/greenwood/audit-logs",
            params={"action": "bulk_staff_import_commit"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert [log["action"] for log in response.json()["items"]] == ["bulk_staff_import_commit"]


class TestSchools:
    async def test_platform_admin_creates_school(self, client, store, actor_id):
        store.platform_admins.add(actor_id)
        headers = auth_header(actor_id)

        response = await client.post(
            "/api/v1/provisioning/schools",
            json={
                "slug": "riverside",
                "name": "Riverside High",
                "principalEmail": "head@riverside.test",
                "principalPassword": "password123",
            },
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["school"]["slug"] == "riverside"
        assert data["school"]["isActive"] is True
        assert data["principalUserId"]


class TestBootstrap:
    def body(self, **overrides):
        values = {
            "bootstrapSecret": "bootstrap-secret",
            "schoolSlug": "riverside",
            "schoolName": "Riverside High",
            "adminEmail": "admin@riverside.test",
            "adminPassword": "password123",
        }
        values.update(overrides)
        return values

    async def test_bootstrap(self, client, provider):
        response = await client.post("/api/v1/bootstrap", json=self.body())

        assert response.status_code == 200
        data = response.json()
        assert data["adminUserId"] == str(provider.user_id("admin@riverside.test"))
        assert data["school"]["slug"] == "riverside"

    async def test_wrong_secret(self, client):
        response = await client.post("/api/v1/bootstrap", json=self.body(bootstrapSecret="nope"))

        assert response.status_code == 401

    async def test_locked(self, client):
        await client.post("/api/v1/bootstrap", json=self.body())

        response = await client.post("/api/v1/bootstrap", json=self.body())

        assert response.status_code == 409

    async def test_recover_master(self, client, store):
        response = await client.post(
            "/api/v1/bootstrap/recover-master",
            json={
                "recoverySecret": "recovery-secret",
                "newEmail": " Owner@Platform.test",
                "newPassword": "password123",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "owner@platform.test"
        assert len(store.platform_admins) == 1

    async def test_recover_master_wrong_secret(self, client):
        response = await client.post(
            "/api/v1/bootstrap/recover-master",
            json={"recoverySecret": "guess", "newEmail": "x@y.z", "newPassword": "password123"},
        )

        assert response.status_code == 403

    async def test_platform_admin_unlocks(self, client, store, actor_id):
        await client.post("/api/v1/bootstrap", json=self.body())
        store.platform_admins.add(actor_id)
        headers = auth_header(actor_id)

        response = await client.post(
            "/api/v1/bootstrap/unlock", json={"schoolSlug": "riverside"}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["school"]["slug"] == "riverside"
        assert (await client.post("/api/v1/bootstrap", json=self.body())).status_code == 200

    async def test_unlock_requires_token(self, client):
        response = await client.post("/api/v1/bootstrap/unlock", json={"schoolSlug": "riverside"})

        assert response.status_code == 401

    async def test_unlock_forbidden_without_platform_admin(self, client, store):
        await client.post("/api/v1/bootstrap", json=self.body())
        principal_id = uuid4()
        store.grant(store.tenants["riverside"].id, principal_id, "principal")
        headers = auth_header(principal_id)

        response = await client.post(
            "/api/v1/bootstrap/unlock", json={"schoolSlug": "riverside"}, headers=headers
        )

        assert response.status_code == 403
