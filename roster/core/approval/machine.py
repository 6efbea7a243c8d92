"""Approval state machine.

Computes the effect of a decision on a request; it never touches storage.
"""

from typing import NamedTuple, Optional
from uuid import UUID

from .chain import ApprovalChain
from .errors import InvalidApprovalLevelError, RequestAlreadyDecidedError
from .states import (
    Decision,
    RequestStatus,
    TERMINAL_STATUSES,
    get_approval_rule,
)


class Transition(NamedTuple):
    """Result of applying a decision."""
    status: RequestStatus
    level: int
    next_approver_position_id: Optional[UUID]


class ApprovalStateMachine:
    """
    State machine for one roster request.

    State is (status, level). Approvals walk the chain one level at a time,
    a rejection ends the request at any level.
    """

    def __init__(self, chain: ApprovalChain, status: RequestStatus, level: int):
        self.chain = chain
        self._status = RequestStatus(status)
        self._level = level

    @property
    def status(self) -> RequestStatus:
        return self._status

    @property
    def level(self) -> int:
        return self._level

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal (no further decisions)."""
        return self._status in TERMINAL_STATUSES

    def can_decide(self, decision: Decision) -> bool:
        """Check if a decision is allowed from the current state."""
        if self.is_terminal:
            return False
        if Decision(decision) == Decision.REJECTED:
            return True
        return get_approval_rule(self._level) is not None

    def decide(self, decision: Decision) -> Transition:
        """
        Apply a decision.

        Returns:
            The transition to persist

        Raises:
            RequestAlreadyDecidedError: If the request is APPROVED or REJECTED
            InvalidApprovalLevelError: If an approval targets a level outside the chain
        """
        if self.is_terminal:
            raise RequestAlreadyDecidedError(
                details=f"Request is already {self._status.value}"
            )

        if Decision(decision) == Decision.REJECTED:
            transition = Transition(RequestStatus.REJECTED, self._level, None)
        else:
            rule = get_approval_rule(self._level)
            if rule is None:
                raise InvalidApprovalLevelError(self._level)

            if rule.to_status in TERMINAL_STATUSES:
                next_approver = None
            else:
                next_approver = self.chain.approver_for(rule.to_level)
            transition = Transition(rule.to_status, int(rule.to_level), next_approver)

        self._status, self._level = transition.status, transition.level
        return transition


def next_step(chain: ApprovalChain, status: RequestStatus, level: int, decision: Decision) -> Transition:
    """Transition function: effect of ``decision`` on a request in (status, level)."""
    return ApprovalStateMachine(chain, status, level).decide(decision)
