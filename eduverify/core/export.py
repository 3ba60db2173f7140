import csv
import io
from typing import Dict, List

from eduverify.store.models import Candidate, VerificationRequest
from eduverify.utils.time import parse_iso

HEADERS = ["Request ID", "Candidate", "University", "Status", "Payment", "Created", "Due"]


def _date(ts: str) -> str:
    dt = parse_iso(ts)
    return dt.strftime("%Y-%m-%d") if dt else "-"


def export_csv(requests: List[VerificationRequest], candidates: Dict[str, Candidate]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADERS)
    for r in requests:
        c = candidates.get(r.candidateId)
        writer.writerow([
            r.id,
            (c.fullName if c else "") or "-",
            (c.universityName if c else "") or "-",
            r.status,
            r.payment.status,
            _date(r.createdAt),
            _date(r.dueAt),
        ])
    return buf.getvalue()
