"""Dashboard statistics for admins and managers."""

import calendar
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from roster.core.approval.states import RequestStatus, RequestType
from roster.core.rbac.roles import UserRole
from roster.db.models import Request, User

TREND_MONTHS = 6
TOP_REASONS = 5


def months_back(today: date, count: int) -> List[date]:
    """First days of the ``count`` months ending with today's month, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append(date(year, month, 1))
        month -= 1
        if month == 0:
            month, year = 12, year - 1
    return list(reversed(months))


def personnel(requests: List[Request], today: date) -> List[Dict[str, Any]]:
    return [
        {
            "requestId": str(r.id),
            "userId": str(r.user_id),
            "userName": r.user.name if r.user else None,
            "userEmail": r.user.email if r.user else None,
            "startDate": r.start_date.isoformat(),
            "endDate": r.end_date.isoformat(),
            "durationDays": (today - r.start_date).days + 1,
            "reason": r.reason,
        }
        for r in requests
    ]


def compute_stats(db: Session, viewer: User, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Summary of requests and personnel.

    Managers see their direct reports only, admins see everything.
    """
    today = today or date.today()

    users_query = db.query(User).options(selectinload(User.location), selectinload(User.region))
    if viewer.role == UserRole.MANAGER.value:
        users_query = users_query.filter(User.manager_id == viewer.id)
    users = users_query.all()
    user_ids = {u.id for u in users}

    requests_query = db.query(Request).options(selectinload(Request.user))
    if viewer.role == UserRole.MANAGER.value:
        requests_query = requests_query.filter(Request.user_id.in_(user_ids))
    requests = requests_query.all()

    by_status = Counter(r.status for r in requests)
    by_type = Counter(r.type for r in requests)
    month_start = today.replace(day=1)

    active = sorted(
        (
            r for r in requests
            if r.status == RequestStatus.APPROVED.value and r.start_date <= today <= r.end_date
        ),
        key=lambda r: r.start_date,
    )

    trends = []
    for first in months_back(today, TREND_MONTHS):
        in_month = [
            r for r in requests
            if r.created_at and (r.created_at.year, r.created_at.month) == (first.year, first.month)
        ]
        trends.append({
            "name": calendar.month_abbr[first.month],
            "month": first.month,
            "year": first.year,
            "Onsite": sum(1 for r in in_month if r.type == RequestType.ONSITE.value),
            "Offsite": sum(1 for r in in_month if r.type == RequestType.OFFSITE.value),
            "Total": len(in_month),
        })

    reasons = Counter((r.reason or "").strip() for r in requests)
    reasons.pop("", None)

    users_by_id = {u.id: u for u in users}
    location_counts: Counter = Counter()
    region_counts: Counter = Counter()
    for r in requests:
        owner = users_by_id.get(r.user_id) or r.user
        if owner is None:
            continue
        location_counts[owner.location.name if owner.location else "Unknown"] += 1
        region_counts[owner.region.name if owner.region else "Unknown"] += 1

    return {
        "totalEmployees": sum(1 for u in users if u.is_active and u.role == UserRole.EMPLOYEE.value),
        "pendingRequests": by_status[RequestStatus.PENDING.value],
        "approvedRequests": sum(
            1 for r in requests
            if r.status == RequestStatus.APPROVED.value and r.created_at and r.created_at.date() >= month_start
        ),
        "onsiteCount": by_type[RequestType.ONSITE.value],
        "offsiteCount": by_type[RequestType.OFFSITE.value],
        "statusCounts": {
            "approved": by_status[RequestStatus.APPROVED.value],
            "rejected": by_status[RequestStatus.REJECTED.value],
            "pending": by_status[RequestStatus.PENDING.value],
        },
        "onsitePersonnel": personnel([r for r in active if r.type == RequestType.ONSITE.value], today),
        "offsitePersonnel": personnel([r for r in active if r.type == RequestType.OFFSITE.value], today),
        "monthlyTrends": trends,
        "topReasons": [{"name": name, "value": value} for name, value in reasons.most_common(TOP_REASONS)],
        "locationCounts": [{"name": k, "value": v} for k, v in location_counts.most_common()],
        "regionCounts": [{"name": k, "value": v} for k, v in region_counts.most_common()],
    }
