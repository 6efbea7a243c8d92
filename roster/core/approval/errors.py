"""Errors raised by the approval workflow.

Each error carries the HTTP status the API layer answers with.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for approval workflow errors."""

    status_code = 400
    error = "Workflow error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[str] = None):
        super().__init__(message or self.error)
        self.message = message or self.error
        self.details = details


class RequestNotFoundError(WorkflowError):
    status_code = 404
    error = "Request not found"


class InvalidDecisionError(WorkflowError):
    status_code = 400
    error = "Invalid status"


class PermissionDeniedError(WorkflowError):
    """Raised when the acting user may not decide on the request."""

    status_code = 403
    error = "Forbidden"


class RequestAlreadyDecidedError(WorkflowError):
    """Raised when a decision targets an APPROVED or REJECTED request."""

    status_code = 409
    error = "Request already decided"


class InvalidApprovalLevelError(WorkflowError):
    """Raised when a pending request sits at a level outside the chain."""

    status_code = 409
    error = "Invalid approval level"

    def __init__(self, level: int):
        super().__init__(f"No transition defined for approval level {level}")
        self.level = level


class ConcurrentDecisionError(WorkflowError):
    """Raised when another decision on the same request committed first."""

    status_code = 409
    error = "Concurrent decision"


class ChainConfigurationError(WorkflowError):
    """Raised when the position reference data cannot form an approval chain."""

    status_code = 500
    error = "Approval chain is not configured"


class InvalidRequestError(WorkflowError):
    """Raised when submitted request data is inconsistent (e.g. end before start)."""

    status_code = 400
    error = "Invalid request"
