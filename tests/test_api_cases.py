"""
Staff case management API tests
"""
import pytest
from httpx import AsyncClient

from complyark.core.catalogue import CLOSED_STATUS_ID
from complyark.core.intake import SubmissionIntake
from complyark.core.records import CaseKind, SubjectDetails
from tests.conftest import (
    ACME_ADMIN_ID, ACME_ID, ACME_USER_ID, GLOBEX_ADMIN_ID, GLOBEX_ID, SYSTEM_ADMIN_ID, as_user,
)


@pytest.fixture
async def cases(memory_store):
    """Two Acme cases (request, grievance) and one Globex request"""
    intake = SubmissionIntake(memory_store)
    subject = SubjectDetails(first_name="Jo", last_name="Lee", email="jo@x.com", phone="555")
    return [
        await intake.submit(CaseKind.DATA_PRINCIPAL_REQUEST, subject, ACME_ID, comment="need my data"),
        await intake.submit(CaseKind.GRIEVANCE, subject, ACME_ID, comment="spam calls"),
        await intake.submit(CaseKind.DATA_PRINCIPAL_REQUEST, subject, GLOBEX_ID, comment="erase me"),
    ]


class TestIdentity:

    async def test_missing_user_header(self, client: AsyncClient):
        response = await client.get("/api/v1/cases/")
        assert response.status_code == 401

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.get("/api/v1/cases/", headers=as_user(999))
        assert response.status_code == 401


class TestListCases:

    async def test_scoped_to_own_organisation(self, client: AsyncClient, cases):
        response = await client.get("/api/v1/cases/", headers=as_user(ACME_USER_ID))

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data] == [1, 2]
        assert all(c["organisation_id"] == ACME_ID for c in data)

    async def test_filter_by_kind(self, client: AsyncClient, cases):
        response = await client.get(
            "/api/v1/cases/", params={"kind": "Grievance"}, headers=as_user(ACME_ADMIN_ID)
        )
        assert [c["id"] for c in response.json()] == [2]

    async def test_system_admin_sees_every_organisation(self, client: AsyncClient, cases):
        response = await client.get("/api/v1/cases/", headers=as_user(SYSTEM_ADMIN_ID))
        assert len(response.json()) == 3


class TestCaseDetail:

    async def test_get_case(self, client: AsyncClient, cases):
        response = await client.get("/api/v1/cases/1", headers=as_user(ACME_USER_ID))

        assert response.status_code == 200
        assert response.json()["status_name"] == "Submitted"

    async def test_other_tenant_case_not_found(self, client: AsyncClient, cases):
        response = await client.get("/api/v1/cases/3", headers=as_user(ACME_USER_ID))

        assert response.status_code == 404
        assert response.json()["error_type"] == "CaseNotFoundError"

    async def test_history(self, client: AsyncClient, cases):
        response = await client.get("/api/v1/cases/1/history", headers=as_user(ACME_USER_ID))

        assert response.status_code == 200
        history = response.json()
        assert len(history) == 1
        assert history[0]["updated_by_name"] == "Jo Lee (Requester)"


class TestStatusChange:

    async def test_close_case(self, client: AsyncClient, cases):
        response = await client.post(
            "/api/v1/cases/1/status",
            json={"status_id": CLOSED_STATUS_ID, "comment": "Data shared"},
            headers=as_user(ACME_ADMIN_ID)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status_name"] == "Closed"
        assert data["closed_at"] is not None
        assert data["closure_comment"] == "Data shared"

        history = (await client.get("/api/v1/cases/1/history", headers=as_user(ACME_ADMIN_ID))).json()
        assert history[-1]["status_name"] == "Closed"
        assert history[-1]["updated_by_name"] == "Alice Admin"

    async def test_invalid_status(self, client: AsyncClient, cases):
        response = await client.post(
            "/api/v1/cases/1/status", json={"status_id": 42}, headers=as_user(ACME_ADMIN_ID)
        )

        assert response.status_code == 400
        assert response.json()["error_type"] == "InvalidStatusError"

    async def test_cannot_change_other_tenant_case(self, client: AsyncClient, cases, memory_store):
        response = await client.post(
            "/api/v1/cases/3/status", json={"status_id": 2}, headers=as_user(ACME_ADMIN_ID)
        )

        assert response.status_code == 404
        assert len(await memory_store.get_history_for_case(3)) == 1


class TestAssignment:

    async def test_assign_to_colleague(self, client: AsyncClient, cases):
        response = await client.post(
            "/api/v1/cases/1/assign", json={"assignee_id": ACME_USER_ID}, headers=as_user(ACME_ADMIN_ID)
        )

        assert response.status_code == 200
        assert response.json()["assigned_to"] == ACME_USER_ID

    async def test_assign_across_tenants_rejected(self, client: AsyncClient, cases):
        response = await client.post(
            "/api/v1/cases/1/assign", json={"assignee_id": GLOBEX_ADMIN_ID}, headers=as_user(ACME_ADMIN_ID)
        )

        assert response.status_code == 422
        assert response.json()["fields"] == ["assignee_id"]


class TestSummaryAndStatuses:

    async def test_summary(self, client: AsyncClient, cases):
        response = await client.get("/api/v1/cases/summary", headers=as_user(ACME_ADMIN_ID))

        assert response.status_code == 200
        data = response.json()
        assert data["organisation_id"] == ACME_ID
        assert data["total"] == 2
        assert data["open"] == 2
        assert data["by_status"]["Submitted"] == 2

    async def test_status_catalogue(self, client: AsyncClient):
        response = await client.get("/api/v1/statuses/")

        assert response.status_code == 200
        statuses = {s["name"]: s for s in response.json()}
        assert statuses["Submitted"]["sla_days"] == 7
        assert statuses["Closed"]["is_terminal"] is True
