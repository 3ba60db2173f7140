from datetime import datetime
from typing import List, Optional

from eduverify.core import state_machine as sm
from eduverify.store.models import VerificationRequest
from eduverify.utils.time import parse_iso, utc_now

RECENT_LIMIT = 5


def is_overdue(request: VerificationRequest, now: Optional[datetime] = None) -> bool:
    """Only work in progress can breach the SLA."""
    if request.status != sm.IN_PROGRESS:
        return False
    due = parse_iso(request.dueAt)
    return due is not None and due < (now or utc_now())


def dashboard_stats(requests: List[VerificationRequest], now: Optional[datetime] = None) -> dict:
    """KPIs over a newest-first request list."""
    now = now or utc_now()
    paid = [r for r in requests if r.payment.status == sm.PAID]
    return {
        "open": sum(1 for r in requests if r.status == sm.IN_PROGRESS),
        "verified": sum(1 for r in requests if r.status == sm.VERIFIED),
        "rejected": sum(1 for r in requests if r.status == sm.REJECTED),
        "revenue": sum(r.fee for r in paid),
        "paidCount": len(paid),
        "slaBreach": sum(1 for r in requests if is_overdue(r, now)),
        "recent": requests[:RECENT_LIMIT],
    }
