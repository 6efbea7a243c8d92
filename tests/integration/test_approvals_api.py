"""Tests for the approval endpoints."""

import uuid
from datetime import date, timedelta

import pytest

from roster.db.models import Approval, Request
from tests.factories import create_approval, create_chain_positions, create_request, create_user


@pytest.fixture
def positions(db_session):
    return create_chain_positions(db_session)


@pytest.fixture
def people(db_session, positions):
    return {
        "sos": create_user(db_session, name="Sari", position=positions["SOS"]),
        "staff": create_user(db_session, position=positions["Staff"]),
        "gsl": create_user(db_session, position=positions["GSL"]),
        "koordinator": create_user(db_session, position=positions["Koordinator"]),
        "manager": create_user(db_session, role="MANAGER", position=positions["Manager"]),
        "admin": create_user(db_session, role="ADMIN"),
        "plain": create_user(db_session),
    }


def submit(client, headers):
    start = date.today() + timedelta(days=3)
    response = client.post(
        "/api/requests",
        json={
            "type": "OFFSITE",
            "startDate": start.isoformat(),
            "endDate": (start + timedelta(days=1)).isoformat(),
            "reason": "Vendor meeting",
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def decide(client, headers, request_id, status, **extra):
    return client.post("/api/approvals", json={"requestId": request_id, "status": status, **extra}, headers=headers)


class TestDecisionFlow:
    def test_sos_request_walks_the_chain(self, client, db_session, people, positions, login_as):
        request = submit(client, login_as(people["sos"]))

        response = decide(client, login_as(people["gsl"]), request["id"], "APPROVED", comment="ok")
        assert response.status_code == 200
        updated, approval = response.json()
        assert updated["status"] == "PENDING"
        assert updated["currentApprovalLevel"] == 2
        assert updated["nextApproverPositionId"] == str(positions["Koordinator"].id)
        assert approval["approvalLevel"] == 1
        assert approval["approverId"] == str(people["gsl"].id)
        assert approval["comment"] == "ok"

        updated, approval = decide(client, login_as(people["koordinator"]), request["id"], "APPROVED").json()
        assert updated["currentApprovalLevel"] == 3
        assert approval["approvalLevel"] == 2

        updated, approval = decide(client, login_as(people["manager"]), request["id"], "APPROVED").json()
        assert updated["status"] == "APPROVED"
        assert updated["nextApproverPositionId"] is None
        assert approval["approvalLevel"] == 3

        history = client.get(f"/api/approvals/{request['id']}/history", headers=login_as(people["sos"])).json()
        assert [a["approvalLevel"] for a in history] == [1, 2, 3]

    def test_staff_request_needs_only_the_manager(self, client, people, login_as):
        request = submit(client, login_as(people["staff"]))
        updated, _ = decide(client, login_as(people["manager"]), request["id"], "APPROVED").json()
        assert updated["status"] == "APPROVED"

    def test_rejection_is_final(self, client, db_session, people, login_as):
        request = submit(client, login_as(people["sos"]))

        updated, approval = decide(
            client, login_as(people["gsl"]), request["id"], "REJECTED", comment="Not now"
        ).json()
        assert updated["status"] == "REJECTED"
        assert updated["currentApprovalLevel"] == 1
        assert approval["status"] == "REJECTED"

        response = decide(client, login_as(people["koordinator"]), request["id"], "APPROVED")
        assert response.status_code == 409
        assert response.json()["error"] == "Request already decided"

    def test_repeated_decision_is_refused(self, client, db_session, people, login_as):
        request = submit(client, login_as(people["staff"]))
        manager = login_as(people["manager"])
        decide(client, manager, request["id"], "APPROVED")

        response = decide(client, manager, request["id"], "APPROVED")

        assert response.status_code == 409
        assert db_session.query(Approval).count() == 1

    def test_location_is_recorded(self, client, people, login_as):
        request = submit(client, login_as(people["staff"]))
        _, approval = decide(
            client, login_as(people["manager"]), request["id"], "APPROVED", approvalLat=-6.2, approvalLong=106.8
        ).json()
        assert (approval["approvalLat"], approval["approvalLong"]) == (-6.2, 106.8)


class TestDecisionErrors:
    def test_invalid_status(self, client, people, login_as):
        request = submit(client, login_as(people["staff"]))
        response = decide(client, login_as(people["manager"]), request["id"], "MAYBE")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid status"

    def test_missing_request_id(self, client, people, login_as):
        response = client.post("/api/approvals", json={"status": "APPROVED"}, headers=login_as(people["manager"]))
        assert response.status_code == 400

    def test_unknown_request(self, client, people, login_as):
        response = decide(
            client, login_as(people["manager"]), "00000000-0000-0000-0000-000000000000", "APPROVED"
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Request not found"

    def test_user_without_approval_rights(self, client, people, login_as):
        request = submit(client, login_as(people["staff"]))
        response = decide(client, login_as(people["plain"]), request["id"], "APPROVED")
        assert response.status_code == 403

    def test_wrong_position(self, client, db_session, people, login_as):
        request = submit(client, login_as(people["sos"]))

        response = decide(client, login_as(people["koordinator"]), request["id"], "APPROVED")

        assert response.status_code == 403
        stored = db_session.get(Request, uuid.UUID(request["id"]))
        assert stored.current_approval_level == 1

    def test_admin_override(self, client, people, login_as):
        request = submit(client, login_as(people["sos"]))
        updated, _ = decide(client, login_as(people["admin"]), request["id"], "APPROVED").json()
        assert updated["currentApprovalLevel"] == 2

    def test_duplicate_level_is_a_conflict(self, client, db_session, people, positions, login_as):
        request = create_request(db_session, user=people["staff"], level=3, next_approver=positions["Manager"])
        create_approval(db_session, request=request, approver=people["admin"], status="REJECTED", level=3)

        response = decide(client, login_as(people["manager"]), str(request.id), "APPROVED")

        assert response.status_code == 409
        assert response.json()["error"] == "Concurrent decision"


class TestPendingList:
    def test_queue_of_a_position(self, client, people, positions, login_as):
        request = submit(client, login_as(people["sos"]))
        submit(client, login_as(people["staff"]))

        data = client.get("/api/approvals", headers=login_as(people["gsl"])).json()

        assert [r["id"] for r in data] == [request["id"]]
        item = data[0]
        assert item["user"]["name"] == "Sari"
        assert item["user"]["positionName"] == "SOS Jakarta"
        assert item["nextApproverPositionName"] == "GSL Jakarta"
        assert item["approvals"] == []

    def test_history_is_attached(self, client, people, login_as):
        request = submit(client, login_as(people["sos"]))
        decide(client, login_as(people["gsl"]), request["id"], "APPROVED", comment="fine")

        data = client.get("/api/approvals", headers=login_as(people["koordinator"])).json()

        assert len(data) == 1
        assert data[0]["approvals"][0]["comment"] == "fine"
        assert data[0]["approvals"][0]["approver"]["id"] == str(people["gsl"].id)

    def test_admin_sees_every_pending_request(self, client, people, login_as):
        first = submit(client, login_as(people["sos"]))
        second = submit(client, login_as(people["staff"]))

        data = client.get("/api/approvals", headers=login_as(people["admin"])).json()

        assert [r["id"] for r in data] == [first["id"], second["id"]]

    def test_no_approval_rights_gives_empty_list(self, client, people, login_as):
        submit(client, login_as(people["staff"]))
        response = client.get("/api/approvals", headers=login_as(people["plain"]))
        assert response.status_code == 200
        assert response.json() == []

    def test_decided_requests_leave_the_queue(self, client, people, login_as):
        request = submit(client, login_as(people["staff"]))
        manager = login_as(people["manager"])
        decide(client, manager, request["id"], "REJECTED")

        assert client.get("/api/approvals", headers=manager).json() == []


class TestApprovalHistory:
    def history(self, client, headers, request_id):
        return client.get(f"/api/approvals/{request_id}/history", headers=headers)

    def test_unrelated_employee_is_forbidden(self, client, people, login_as):
        request = submit(client, login_as(people["sos"]))
        decide(client, login_as(people["gsl"]), request["id"], "APPROVED")

        response = self.history(client, login_as(people["plain"]), request["id"])

        assert response.status_code == 403
        assert "approver" not in response.text

    def test_participants_can_read(self, client, people, login_as):
        request = submit(client, login_as(people["sos"]))
        decide(client, login_as(people["gsl"]), request["id"], "APPROVED")

        for reader in ("sos", "gsl", "koordinator", "manager", "admin"):
            response = self.history(client, login_as(people[reader]), request["id"])
            assert response.status_code == 200, reader
            assert [a["approvalLevel"] for a in response.json()] == [1]

    def test_unknown_request(self, client, people, login_as):
        response = self.history(client, login_as(people["admin"]), uuid.uuid4())
        assert response.status_code == 404
