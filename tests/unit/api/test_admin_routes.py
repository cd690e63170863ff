"""Tests for the administrative complaint routes."""

from dataclasses import replace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from civicledger.infrastructure.stubs.complaint_repository_stub import (
    ComplaintRepositoryStub,
)
from civicledger.infrastructure.stubs.ledger_contract_stub import LedgerContractStub
from tests.helpers import ADMIN_HEADERS, CITIZEN_HEADERS, complaint_payload


@pytest.fixture
def complaint(client: TestClient) -> dict:
    response = client.post(
        "/v1/complaints", json=complaint_payload(), headers=CITIZEN_HEADERS
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestAdminAuth:
    def test_missing_actor(self, client: TestClient, complaint: dict) -> None:
        response = client.patch(f"/v1/admin/complaints/{complaint['id']}/verify")
        assert response.status_code == 401

    @pytest.mark.parametrize("role", [None, "citizen", "administrator"])
    def test_non_admin_role(
        self, client: TestClient, complaint: dict, role: str | None
    ) -> None:
        headers = dict(CITIZEN_HEADERS)
        if role is not None:
            headers["X-Actor-Role"] = role

        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/verify", headers=headers
        )

        assert response.status_code == 403

    def test_role_is_case_insensitive(self, client: TestClient, complaint: dict) -> None:
        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/verify",
            headers={"X-Actor-ID": "admin-1", "X-Actor-Role": "Admin"},
        )
        assert response.status_code == 200


class TestStatusChanges:
    def test_verify(
        self, client: TestClient, complaint: dict, ledger_stub: LedgerContractStub
    ) -> None:
        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/verify", headers=ADMIN_HEADERS
        )

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "Verified"
        assert body["verified_by"] == "admin-1"
        assert [h["status"] for h in body["status_history"]] == ["Reported", "Verified"]
        assert ledger_stub.get_entry(complaint["id"]).status_code == 1

    def test_update_status(self, client: TestClient, complaint: dict) -> None:
        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/status",
            json={"status": "InProgress"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "InProgress"

    def test_unknown_status(self, client: TestClient, complaint: dict) -> None:
        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/status",
            json={"status": "Closed"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "status"

    def test_unknown_complaint(self, client: TestClient) -> None:
        response = client.patch(
            f"/v1/admin/complaints/{uuid4()}/verify", headers=ADMIN_HEADERS
        )
        assert response.status_code == 404

    def test_ledger_failure_leaves_status(
        self,
        client: TestClient,
        complaint: dict,
        ledger_stub: LedgerContractStub,
    ) -> None:
        ledger_stub.fail_next_submission()

        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/verify", headers=ADMIN_HEADERS
        )

        assert response.status_code == 503
        assert response.json()["detail"]["operation"] == "submit_status_transition"
        assert client.get(f"/v1/complaints/{complaint['id']}").json()["status"] == "Reported"

    def test_strict_transitions(
        self,
        client: TestClient,
        complaint: dict,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("LIFECYCLE_ENFORCE_NOMINAL_TRANSITIONS", "true")
        # Rebuilt with the new config on next use
        monkeypatch.setattr("civicledger.bootstrap.complaints._lifecycle_service", None)

        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/status",
            json={"status": "InProgress"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["current_status"] == "Reported"
        assert detail["requested_status"] == "InProgress"
        assert detail["allowed_statuses"] == ["Verified"]


class TestResolve:
    def test_resolve_with_images(
        self, client: TestClient, complaint: dict, ledger_stub: LedgerContractStub
    ) -> None:
        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/resolve",
            json={"resolution_image_refs": ["after-1.jpg"]},
            headers=ADMIN_HEADERS,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "Resolved"
        assert body["resolution_image_refs"] == ["after-1.jpg"]
        assert body["resolution_hash"] == ledger_stub.get_entry(complaint["id"]).resolution_hash
        assert body["resolution_transaction_id"].startswith("0x")

    def test_resolve_without_body(self, client: TestClient, complaint: dict) -> None:
        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/resolve", headers=ADMIN_HEADERS
        )
        assert response.status_code == 200

    def test_resolve_twice(self, client: TestClient, complaint: dict) -> None:
        url = f"/v1/admin/complaints/{complaint['id']}/resolve"
        first = client.patch(url, headers=ADMIN_HEADERS).json()

        response = client.patch(url, headers=ADMIN_HEADERS)

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["type"].endswith("resolution-already-recorded")
        assert detail["resolution_transaction_id"] == first["resolution_transaction_id"]

    def test_status_resolved_records_resolution(
        self, client: TestClient, complaint: dict
    ) -> None:
        response = client.patch(
            f"/v1/admin/complaints/{complaint['id']}/status",
            json={"status": "Resolved"},
            headers=ADMIN_HEADERS,
        )
        assert response.json()["resolution_transaction_id"] is not None

    def test_reopened_complaint_status_resolved(
        self, client: TestClient, complaint: dict
    ) -> None:
        base = f"/v1/admin/complaints/{complaint['id']}"
        first = client.patch(f"{base}/resolve", headers=ADMIN_HEADERS).json()
        client.patch(f"{base}/status", json={"status": "InProgress"}, headers=ADMIN_HEADERS)

        response = client.patch(
            f"{base}/status", json={"status": "Resolved"}, headers=ADMIN_HEADERS
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Resolved"
        assert body["resolution_transaction_id"] == first["resolution_transaction_id"]


class TestDelete:
    def test_delete_keeps_ledger_entry(
        self,
        client: TestClient,
        complaint: dict,
        ledger_stub: LedgerContractStub,
    ) -> None:
        response = client.delete(
            f"/v1/admin/complaints/{complaint['id']}", headers=ADMIN_HEADERS
        )

        assert response.status_code == 204
        assert client.get(f"/v1/complaints/{complaint['id']}").status_code == 404
        assert ledger_stub.get_entry(complaint["id"]) is not None

    def test_delete_requires_admin(self, client: TestClient, complaint: dict) -> None:
        response = client.delete(
            f"/v1/admin/complaints/{complaint['id']}", headers=CITIZEN_HEADERS
        )
        assert response.status_code == 403


class TestAnomalies:
    def test_clean(self, client: TestClient, complaint: dict) -> None:
        body = client.get("/v1/admin/anomalies", headers=ADMIN_HEADERS).json()

        assert body["checked_count"] == 1
        assert body["anomaly_count"] == 0
        assert body["anomalies"] == []
        assert body["check_integrity"] is False

    def test_missing_on_chain(
        self, client: TestClient, complaint: dict, ledger_stub: LedgerContractStub
    ) -> None:
        ledger_stub.forget(complaint["id"])

        body = client.get("/v1/admin/anomalies", headers=ADMIN_HEADERS).json()

        assert body["anomalies"] == [
            {
                "complaintId": complaint["id"],
                "type": "missing_on_chain",
                "message": "Complaint exists in DB but not on blockchain",
            }
        ]

    def test_integrity_sweep(
        self,
        client: TestClient,
        complaint: dict,
        store_stub: ComplaintRepositoryStub,
    ) -> None:
        stored = store_stub._complaints
        for complaint_id, record in list(stored.items()):
            stored[complaint_id] = replace(record, description="Edited directly in the database")

        body = client.get(
            "/v1/admin/anomalies",
            params={"check_integrity": "true"},
            headers=ADMIN_HEADERS,
        ).json()

        assert [a["type"] for a in body["anomalies"]] == ["content_hash_mismatch"]

    def test_ledger_unavailable(
        self, client: TestClient, complaint: dict, ledger_stub: LedgerContractStub
    ) -> None:
        ledger_stub.set_unavailable(True)

        response = client.get("/v1/admin/anomalies", headers=ADMIN_HEADERS)

        assert response.status_code == 503
