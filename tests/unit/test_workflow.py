"""Tests for the approval workflow service, run against the in-memory repository."""

import uuid
from datetime import date, datetime, timedelta

import pytest

from roster.core.approval import Actor, ApprovalWorkflow, ApprovalChainProvider
from roster.core.approval.errors import (
    ChainConfigurationError,
    ConcurrentDecisionError,
    InvalidApprovalLevelError,
    InvalidDecisionError,
    InvalidRequestError,
    PermissionDeniedError,
    RequestAlreadyDecidedError,
    RequestNotFoundError,
)
from roster.db.models import Approval
from tests.fakes import InMemoryApprovalRepository, make_positions

START = date(2026, 3, 2)


@pytest.fixture
def positions():
    return {
        p.name: p
        for p in make_positions("SOS Jakarta", "GSL Jakarta", "Koordinator Jawa", "Manager", "Staff")
    }


@pytest.fixture
def repository(positions):
    return InMemoryApprovalRepository(positions.values())


@pytest.fixture
def workflow(repository):
    return ApprovalWorkflow(repository, ApprovalChainProvider())


def actor(position=None, role="EMPLOYEE"):
    return Actor(user_id=uuid.uuid4(), role=role, position_id=position.id if position else None)


def submit(workflow, requester, **overrides):
    values = dict(request_type="ONSITE", start_date=START, end_date=START + timedelta(days=4), reason="Audit")
    values.update(overrides)
    return workflow.submit(requester, **values)


class TestSubmit:
    def test_sos_request_starts_at_gsl(self, workflow, repository, positions):
        request = submit(workflow, actor(positions["SOS Jakarta"]))

        assert request.status == "PENDING"
        assert request.current_approval_level == 1
        assert request.next_approver_position_id == positions["GSL Jakarta"].id
        assert repository.requests[request.id] is request
        assert repository.commits == 1

    def test_staff_request_starts_at_manager(self, workflow, positions):
        request = submit(workflow, actor(positions["Staff"]))
        assert request.current_approval_level == 3
        assert request.next_approver_position_id == positions["Manager"].id

    def test_requester_without_position_starts_at_manager(self, workflow, positions):
        request = submit(workflow, actor())
        assert request.current_approval_level == 3
        assert request.next_approver_position_id == positions["Manager"].id

    def test_stores_submitted_fields(self, workflow, positions):
        request = submit(
            workflow,
            actor(positions["Staff"]),
            request_type="LEAVE",
            justification="",
            request_lat=-6.2,
            request_long=106.8,
        )
        assert request.type == "LEAVE"
        assert request.justification is None
        assert (request.request_lat, request.request_long) == (-6.2, 106.8)
        assert request.start_date == START

    def test_single_day_request(self, workflow, positions):
        request = submit(workflow, actor(positions["Staff"]), end_date=START)
        assert request.end_date == request.start_date

    def test_end_before_start(self, workflow, repository, positions):
        with pytest.raises(InvalidRequestError):
            submit(workflow, actor(positions["Staff"]), end_date=START - timedelta(days=1))
        assert repository.requests == {}

    def test_incomplete_chain_refuses_requests(self):
        repository = InMemoryApprovalRepository(make_positions("SOS Jakarta", "GSL Jakarta", "Manager"))
        workflow = ApprovalWorkflow(repository, ApprovalChainProvider())

        with pytest.raises(ChainConfigurationError):
            submit(workflow, actor())
        assert repository.requests == {}

    def test_chain_is_resolved_once(self, workflow, repository, positions):
        submit(workflow, actor(positions["Staff"]))
        submit(workflow, actor(positions["SOS Jakarta"]))
        assert repository.position_loads == 1


class TestDecide:
    def test_full_chain_for_sos_request(self, workflow, repository, positions):
        request = submit(workflow, actor(positions["SOS Jakarta"]))

        request, approval = workflow.decide(request.id, "APPROVED", actor(positions["GSL Jakarta"]))
        assert (request.status, request.current_approval_level) == ("PENDING", 2)
        assert request.next_approver_position_id == positions["Koordinator Jawa"].id
        assert approval.approval_level == 1

        request, approval = workflow.decide(request.id, "APPROVED", actor(positions["Koordinator Jawa"]))
        assert (request.status, request.current_approval_level) == ("PENDING", 3)
        assert request.next_approver_position_id == positions["Manager"].id
        assert approval.approval_level == 2

        request, approval = workflow.decide(request.id, "APPROVED", actor(positions["Manager"]))
        assert (request.status, request.current_approval_level) == ("APPROVED", 3)
        assert request.next_approver_position_id is None
        assert approval.approval_level == 3

        assert [a.approval_level for a in repository.approvals] == [1, 2, 3]

    def test_staff_request_approved_in_one_step(self, workflow, repository, positions):
        request = submit(workflow, actor(positions["Staff"]))
        request, approval = workflow.decide(request.id, "APPROVED", actor(positions["Manager"]))

        assert request.status == "APPROVED"
        assert request.current_approval_level == 3
        assert len(repository.approvals) == 1

    def test_rejection_is_terminal(self, workflow, repository, positions):
        request = submit(workflow, actor(positions["SOS Jakarta"]))
        request, approval = workflow.decide(
            request.id, "REJECTED", actor(positions["GSL Jakarta"]), comment="No budget"
        )

        assert request.status == "REJECTED"
        assert request.current_approval_level == 1
        assert request.next_approver_position_id is None
        assert approval.status == "REJECTED"
        assert approval.comment == "No budget"

        with pytest.raises(RequestAlreadyDecidedError):
            workflow.decide(request.id, "APPROVED", actor(positions["Koordinator Jawa"]))

    def test_second_decision_changes_nothing(self, workflow, repository, positions):
        request = submit(workflow, actor(positions["Staff"]))
        manager = actor(positions["Manager"])
        workflow.decide(request.id, "APPROVED", manager)

        with pytest.raises(RequestAlreadyDecidedError):
            workflow.decide(request.id, "APPROVED", manager)
        with pytest.raises(RequestAlreadyDecidedError):
            workflow.decide(request.id, "REJECTED", manager)

        assert request.status == "APPROVED"
        assert len(repository.approvals) == 1

    def test_approval_records_decider_and_location(self, workflow, positions):
        request = submit(workflow, actor(positions["Staff"]))
        manager = actor(positions["Manager"])

        _, approval = workflow.decide(
            request.id, "APPROVED", manager, approval_lat=1.5, approval_long=2.5
        )
        assert approval.approver_id == manager.user_id
        assert approval.request_id == request.id
        assert (approval.approval_lat, approval.approval_long) == (1.5, 2.5)
        assert approval.comment == ""

    def test_unknown_decision(self, workflow, positions):
        request = submit(workflow, actor(positions["Staff"]))
        with pytest.raises(InvalidDecisionError):
            workflow.decide(request.id, "MAYBE", actor(positions["Manager"]))

    def test_unknown_request(self, workflow, positions):
        with pytest.raises(RequestNotFoundError):
            workflow.decide(uuid.uuid4(), "APPROVED", actor(positions["Manager"]))

    def test_level_outside_chain(self, workflow, repository, positions):
        request = submit(workflow, actor(positions["Staff"]))
        request.current_approval_level = 0

        with pytest.raises(InvalidApprovalLevelError):
            workflow.decide(request.id, "APPROVED", actor(positions["Manager"]))
        assert repository.approvals == []


class TestAuthorization:
    def test_user_without_approval_rights(self, workflow, positions):
        request = submit(workflow, actor(positions["Staff"]))
        with pytest.raises(PermissionDeniedError):
            workflow.decide(request.id, "APPROVED", actor())

    def test_wrong_position(self, workflow, repository, positions):
        request = submit(workflow, actor(positions["SOS Jakarta"]))

        with pytest.raises(PermissionDeniedError):
            workflow.decide(request.id, "APPROVED", actor(positions["Manager"]))
        assert request.current_approval_level == 1
        assert repository.approvals == []

    def test_admin_may_decide_any_pending_request(self, workflow, positions):
        request = submit(workflow, actor(positions["SOS Jakarta"]))
        request, approval = workflow.decide(request.id, "APPROVED", actor(role="ADMIN"))

        assert request.current_approval_level == 2
        assert approval.approval_level == 1

    def test_manager_role_without_position_acts_as_manager(self, workflow, positions):
        request = submit(workflow, actor(positions["Staff"]))
        request, _ = workflow.decide(request.id, "APPROVED", actor(role="MANAGER"))
        assert request.status == "APPROVED"

    def test_manager_role_without_position_cannot_skip_levels(self, workflow, positions):
        request = submit(workflow, actor(positions["SOS Jakarta"]))
        with pytest.raises(PermissionDeniedError):
            workflow.decide(request.id, "APPROVED", actor(role="MANAGER"))

    def test_terminal_request_reports_already_decided_to_anyone(self, workflow, positions):
        request = submit(workflow, actor(positions["Staff"]))
        workflow.decide(request.id, "REJECTED", actor(positions["Manager"]))

        with pytest.raises(RequestAlreadyDecidedError):
            workflow.decide(request.id, "APPROVED", actor(positions["GSL Jakarta"]))


class TestConcurrency:
    def test_lost_race_rolls_back(self, workflow, repository, positions):
        request = submit(workflow, actor(positions["Staff"]))
        # Another decision at the same level has already committed
        repository.approvals.append(
            Approval(
                id=uuid.uuid4(),
                request_id=request.id,
                approver_id=uuid.uuid4(),
                status="REJECTED",
                approval_level=3,
                created_at=datetime.utcnow(),
            )
        )

        with pytest.raises(ConcurrentDecisionError):
            workflow.decide(request.id, "APPROVED", actor(positions["Manager"]))

        assert request.status == "PENDING"
        assert request.current_approval_level == 3
        assert request.next_approver_position_id == positions["Manager"].id
        assert len(repository.approvals) == 1
        assert repository.rollbacks == 1


class TestPendingFor:
    def test_position_queue(self, workflow, positions):
        sos_request = submit(workflow, actor(positions["SOS Jakarta"]))
        submit(workflow, actor(positions["Staff"]))

        assert workflow.pending_for(actor(positions["GSL Jakarta"])) == [sos_request]
        assert workflow.pending_for(actor(positions["Koordinator Jawa"])) == []

    def test_admin_sees_all_pending(self, workflow, positions):
        first = submit(workflow, actor(positions["SOS Jakarta"]))
        second = submit(workflow, actor(positions["Staff"]))
        third = submit(workflow, actor(positions["Staff"]))
        workflow.decide(third.id, "REJECTED", actor(positions["Manager"]))

        assert workflow.pending_for(actor(role="ADMIN")) == [first, second]

    def test_manager_role_without_position(self, workflow, positions):
        request = submit(workflow, actor(positions["Staff"]))
        assert workflow.pending_for(actor(role="MANAGER")) == [request]

    def test_no_approval_rights(self, workflow, positions):
        submit(workflow, actor(positions["Staff"]))
        assert workflow.pending_for(actor()) == []

    def test_request_moves_between_queues(self, workflow, positions):
        request = submit(workflow, actor(positions["SOS Jakarta"]))
        workflow.decide(request.id, "APPROVED", actor(positions["GSL Jakarta"]))

        assert workflow.pending_for(actor(positions["GSL Jakarta"])) == []
        assert workflow.pending_for(actor(positions["Koordinator Jawa"])) == [request]
