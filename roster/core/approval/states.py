"""Approval workflow states and transitions.

State Machine Diagram:

    ┌───────────┐  approve  ┌───────────┐  approve  ┌───────────┐  approve  ┌──────────┐
    │ PENDING@1 │──────────►│ PENDING@2 │──────────►│ PENDING@3 │──────────►│ APPROVED │
    │   (GSL)   │           │(Koordinat)│           │ (Manager) │           └──────────┘
    └─────┬─────┘           └─────┬─────┘           └─────┬─────┘
          │ reject                │ reject                │ reject
          └───────────────────────┴───────────────────────┴──────────────────►┌──────────┐
                                                                               │ REJECTED │
                                                                               └──────────┘

A request enters at level 1, 2 or 3 depending on the requester's position.
APPROVED and REJECTED are terminal.
"""

from enum import Enum, IntEnum
from typing import Dict, List, NamedTuple, Optional, Set


class RequestStatus(str, Enum):
    """Status of a roster request."""
    
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Decision(str, Enum):
    """A decision an approver can record."""
    
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequestType(str, Enum):
    """Kinds of roster requests."""
    
    ONSITE = "ONSITE"
    OFFSITE = "OFFSITE"
    LEAVE = "LEAVE"


class ApprovalLevel(IntEnum):
    """Approval levels of the chain, named after the approving position."""
    
    GSL = 1
    KOORDINATOR = 2
    MANAGER = 3


class TransitionRule(NamedTuple):
    """Defines where an approval at a given level leads."""
    level: ApprovalLevel
    to_status: RequestStatus
    to_level: ApprovalLevel


# Approvals advance one level at a time; the last level finishes the request.
# Rejections are terminal from any level and need no table.
APPROVAL_RULES: List[TransitionRule] = [
    TransitionRule(ApprovalLevel.GSL, RequestStatus.PENDING, ApprovalLevel.KOORDINATOR),
    TransitionRule(ApprovalLevel.KOORDINATOR, RequestStatus.PENDING, ApprovalLevel.MANAGER),
    TransitionRule(ApprovalLevel.MANAGER, RequestStatus.APPROVED, ApprovalLevel.MANAGER),
]

APPROVAL_TARGETS: Dict[int, TransitionRule] = {int(rule.level): rule for rule in APPROVAL_RULES}

TERMINAL_STATUSES: Set[RequestStatus] = {
    RequestStatus.APPROVED,
    RequestStatus.REJECTED,
}


def is_terminal(status: RequestStatus) -> bool:
    """Check if no further decisions are allowed in this status."""
    return RequestStatus(status) in TERMINAL_STATUSES


def get_approval_rule(level: int) -> Optional[TransitionRule]:
    """Get the rule for approving at ``level``, or None if the level is outside the chain."""
    return APPROVAL_TARGETS.get(level)
