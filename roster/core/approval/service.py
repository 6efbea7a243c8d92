"""Approval workflow service.

Ties the chain resolver, the state machine and the repository together:

- ``submit`` seeds a new request with its first approver and level
- ``decide`` applies one approval decision and records it atomically
- ``pending_for`` lists the queue of an approver
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence, Tuple
from uuid import UUID

from roster.core.rbac.roles import UserRole
from roster.db.models import Approval, Request
from .chain import ApprovalChain, ApprovalChainProvider, chain_provider as default_chain_provider
from .errors import (
    InvalidDecisionError,
    InvalidRequestError,
    PermissionDeniedError,
    RequestNotFoundError,
)
from .machine import ApprovalStateMachine
from .repository import ApprovalRepository
from .states import Decision, RequestStatus, RequestType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The authenticated user acting on the workflow."""
    user_id: UUID
    role: str
    position_id: Optional[UUID] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER.value

    @property
    def can_approve(self) -> bool:
        """Holds a position or an approval-capable role."""
        return self.position_id is not None or self.is_admin or self.is_manager

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(user_id=user.id, role=user.role, position_id=user.position_id)


class ApprovalWorkflow:
    """
    High-level service for the roster approval chain.

    Handles:
    - Seeding new requests from the requester's position
    - Applying approve/reject decisions with persistence
    - Resolving which queue an approver works on
    """

    def __init__(self, repository: ApprovalRepository, chain_provider: Optional[ApprovalChainProvider] = None):
        """
        Args:
            repository: Storage for requests, approvals and positions
            chain_provider: Source of the resolved chain (module-wide cache by default)
        """
        self.repository = repository
        self.chain_provider = chain_provider or default_chain_provider

    @property
    def chain(self) -> ApprovalChain:
        return self.chain_provider.get(self.repository.list_positions)

    def resolve_entry(self, position_id: Optional[UUID]) -> Tuple[UUID, int]:
        """Chain resolver: (first approver position id, starting level) for a requester position."""
        return self.chain.entry_for(position_id)

    def submit(
        self,
        requester: Actor,
        *,
        request_type: RequestType,
        start_date: date,
        end_date: date,
        reason: str,
        justification: Optional[str] = None,
        request_lat: Optional[float] = None,
        request_long: Optional[float] = None,
    ) -> Request:
        """
        Create a PENDING request routed to its first approver.

        Raises:
            InvalidRequestError: If the end date precedes the start date
            ChainConfigurationError: If the position data cannot form a chain
        """
        if end_date < start_date:
            raise InvalidRequestError(details="endDate must not be before startDate")

        next_approver, level = self.resolve_entry(requester.position_id)
        now = datetime.utcnow()

        request = Request(
            id=uuid.uuid4(),
            user_id=requester.user_id,
            type=RequestType(request_type).value,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            justification=justification or None,
            request_lat=request_lat,
            request_long=request_long,
            status=RequestStatus.PENDING.value,
            current_approval_level=level,
            next_approver_position_id=next_approver,
            created_at=now,
            updated_at=now,
        )

        with self.repository.transaction():
            self.repository.add_request(request)

        logger.info(
            "Request %s submitted by %s: level %d, next approver %s",
            request.id, requester.user_id, level, next_approver,
        )
        return request

    def approver_position_for(self, actor: Actor) -> Optional[UUID]:
        """Position whose queue ``actor`` works on; a manager without a position acts as Manager."""
        if actor.position_id is not None:
            return actor.position_id
        if actor.is_manager:
            return self.chain.manager_position_id
        return None

    def pending_for(self, actor: Actor) -> Sequence[Request]:
        """PENDING requests waiting on ``actor``; admins see every PENDING request."""
        if not actor.can_approve:
            return []
        if actor.is_admin:
            return self.repository.list_pending_requests()

        position_id = self.approver_position_for(actor)
        if position_id is None:
            return []
        return self.repository.list_pending_requests(position_id)

    def decide(
        self,
        request_id: UUID,
        decision: Decision,
        actor: Actor,
        *,
        comment: Optional[str] = None,
        approval_lat: Optional[float] = None,
        approval_long: Optional[float] = None,
    ) -> Tuple[Request, Approval]:
        """
        Apply an approval decision and append its Approval record.

        The request update and the approval insert commit together.

        Returns:
            (updated request, new approval)

        Raises:
            InvalidDecisionError: If decision is not APPROVED or REJECTED
            PermissionDeniedError: If actor may not decide on this request
            RequestNotFoundError: If the request does not exist
            RequestAlreadyDecidedError: If the request is no longer PENDING
            InvalidApprovalLevelError: If the request level is outside the chain
            ConcurrentDecisionError: If another decision on the request committed first
        """
        try:
            decision = Decision(decision)
        except ValueError:
            raise InvalidDecisionError(details=f"status must be one of {[d.value for d in Decision]}") from None

        if not actor.can_approve:
            raise PermissionDeniedError("User has no approval rights")

        with self.repository.transaction():
            request = self.repository.get_request_for_update(request_id)
            if request is None:
                raise RequestNotFoundError(details=f"Request {request_id} not found")

            machine = ApprovalStateMachine(self.chain, RequestStatus(request.status), request.current_approval_level)
            if machine.is_terminal:
                # Raised before the approver check so repeated decisions always report the same error
                machine.decide(decision)

            if not actor.is_admin and self.approver_position_for(actor) != request.next_approver_position_id:
                raise PermissionDeniedError("Request is not waiting on your position")

            decided_at_level = request.current_approval_level
            transition = machine.decide(decision)

            now = datetime.utcnow()
            request.status = transition.status.value
            request.current_approval_level = transition.level
            request.next_approver_position_id = transition.next_approver_position_id
            request.updated_at = now

            approval = Approval(
                id=uuid.uuid4(),
                request_id=request.id,
                approver_id=actor.user_id,
                status=decision.value,
                comment=comment or "",
                approval_level=decided_at_level,
                approval_lat=approval_lat,
                approval_long=approval_long,
                created_at=now,
            )
            self.repository.add_approval(approval)

        logger.info(
            "Request %s %s at level %d by %s -> %s@%d",
            request.id, decision.value, decided_at_level, actor.user_id,
            transition.status.value, transition.level,
        )
        return request, approval
