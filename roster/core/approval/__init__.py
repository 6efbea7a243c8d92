"""Approval workflow module for the roster service.

Implements the position-based approval chain, its state machine and the
service that persists decisions.
"""

from .states import RequestStatus, Decision, RequestType, ApprovalLevel, APPROVAL_RULES
from .chain import ApprovalChain, ApprovalChainProvider, build_approval_chain, chain_provider, check_position_change
from .machine import ApprovalStateMachine, Transition, next_step
from .repository import ApprovalRepository, SqlAlchemyApprovalRepository
from .service import Actor, ApprovalWorkflow
from .errors import WorkflowError

__all__ = [
    "RequestStatus",
    "Decision",
    "RequestType",
    "ApprovalLevel",
    "APPROVAL_RULES",
    "ApprovalChain",
    "ApprovalChainProvider",
    "build_approval_chain",
    "check_position_change",
    "chain_provider",
    "ApprovalStateMachine",
    "Transition",
    "next_step",
    "ApprovalRepository",
    "SqlAlchemyApprovalRepository",
    "Actor",
    "ApprovalWorkflow",
    "WorkflowError",
]
