"""Roster approvals service.

Employee onsite/offsite/leave requests routed through a position-based
approval chain.
"""

__version__ = "0.1.0"
