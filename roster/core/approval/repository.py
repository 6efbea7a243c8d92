"""Storage interface of the approval workflow.

The workflow only talks to an ``ApprovalRepository``. ``SqlAlchemyApprovalRepository``
is the production implementation; tests use an in-memory fake.
"""

from contextlib import contextmanager
from typing import ContextManager, Iterator, Optional, Protocol, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from roster.db.models import Approval, Position, Request
from roster.db.models.request import DECISION_PER_LEVEL_CONSTRAINT
from .errors import ConcurrentDecisionError
from .states import RequestStatus


class ApprovalRepository(Protocol):
    def get_request(self, request_id: UUID) -> Optional[Request]:
        raise NotImplementedError

    def get_request_for_update(self, request_id: UUID) -> Optional[Request]:
        """Load a request for modification, locking the row where supported."""
        raise NotImplementedError

    def add_request(self, request: Request) -> Request:
        raise NotImplementedError

    def add_approval(self, approval: Approval) -> Approval:
        raise NotImplementedError

    def list_approvals(self, request_id: UUID) -> Sequence[Approval]:
        """Decisions on a request, oldest first."""
        raise NotImplementedError

    def list_pending_requests(self, position_id: Optional[UUID] = None) -> Sequence[Request]:
        """PENDING requests, oldest first; only those waiting on ``position_id`` if given."""
        raise NotImplementedError

    def get_position(self, position_id: UUID) -> Optional[Position]:
        raise NotImplementedError

    def list_positions(self) -> Sequence[Position]:
        raise NotImplementedError

    def transaction(self) -> ContextManager[None]:
        """All writes inside the block commit together or not at all."""
        raise NotImplementedError


# SQLite reports the columns of a violated unique constraint, other backends its name
DUPLICATE_DECISION_MARKERS = (
    DECISION_PER_LEVEL_CONSTRAINT,
    "approvals.request_id, approvals.approval_level",
)


def is_duplicate_decision(error: IntegrityError) -> bool:
    """Check if ``error`` is a second decision recorded at the same level."""
    message = str(error.orig)
    return any(marker in message for marker in DUPLICATE_DECISION_MARKERS)


class SqlAlchemyApprovalRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_request(self, request_id: UUID) -> Optional[Request]:
        return self.db.query(Request).filter(Request.id == request_id).first()

    def get_request_for_update(self, request_id: UUID) -> Optional[Request]:
        return self.db.query(Request).filter(Request.id == request_id).with_for_update().first()

    def add_request(self, request: Request) -> Request:
        self.db.add(request)
        return request

    def add_approval(self, approval: Approval) -> Approval:
        self.db.add(approval)
        return approval

    def list_approvals(self, request_id: UUID) -> Sequence[Approval]:
        return (
            self.db.query(Approval)
            .filter(Approval.request_id == request_id)
            .order_by(Approval.created_at.asc(), Approval.approval_level.asc())
            .all()
        )

    def list_pending_requests(self, position_id: Optional[UUID] = None) -> Sequence[Request]:
        query = self.db.query(Request).filter(Request.status == RequestStatus.PENDING.value)
        if position_id is not None:
            query = query.filter(Request.next_approver_position_id == position_id)
        return query.order_by(Request.created_at.asc()).all()

    def get_position(self, position_id: UUID) -> Optional[Position]:
        return self.db.get(Position, position_id)

    def list_positions(self) -> Sequence[Position]:
        return self.db.query(Position).order_by(Position.name.asc()).all()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            raise ConcurrentDecisionError("Request was modified concurrently", details=str(e)) from e
        except IntegrityError as e:
            self.db.rollback()
            if not is_duplicate_decision(e):
                raise
            raise ConcurrentDecisionError("Request was modified concurrently", details=str(e.orig)) from e
        except Exception:
            self.db.rollback()
            raise
