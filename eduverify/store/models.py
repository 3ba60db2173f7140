from dataclasses import asdict, dataclass, field, fields as dc_fields
from typing import Any, Dict, List, Optional

# Records keep camelCase field names: their JSON form *is* the persisted layout.

@dataclass
class Company:
    id: str = ""
    companyName: str = ""
    email: str = ""
    website: Optional[str] = None
    companyCertificateUrl: Optional[str] = None
    contactNumber: str = ""
    address: str = ""
    brandLogo: Optional[str] = None
    slaDays: int = 5

@dataclass
class User:
    id: str = ""
    companyId: str = ""
    name: str = ""
    email: str = ""
    role: str = "EMPLOYER"  # EMPLOYER / VERIFIER

@dataclass
class AuthSession:
    user: User = field(default_factory=User)
    company: Company = field(default_factory=Company)

@dataclass
class CompanySignup:
    companyName: str = ""
    email: str = ""
    password: str = ""
    contactNumber: str = ""
    address: str = ""
    website: Optional[str] = None
    # Only the file name: certificates are never stored
    companyCertificateName: Optional[str] = None

@dataclass
class Candidate:
    id: str = ""
    fullName: str = ""
    mobile: str = ""
    email: str = ""
    degreeName: str = ""
    pcNumber: Optional[str] = None
    initials: Optional[str] = None
    universityName: str = ""
    enrollmentOrRollNo: Optional[str] = None
    graduationYear: Optional[int] = None
    documentUrls: List[str] = field(default_factory=list)

@dataclass
class Payment:
    amount: int = 0
    currency: str = "INR"
    status: str = "NOT_PAID"  # NOT_PAID / PAID / FAILED
    txnId: Optional[str] = None
    paidAt: Optional[str] = None
    method: Optional[str] = None  # UPI / Card / NetBanking

@dataclass
class VerificationCheck:
    id: str = ""
    requestId: str = ""
    type: str = "EDUCATION"
    substatus: str = "NOT_STARTED"  # NOT_STARTED / IN_PROGRESS / VERIFIED / ISSUE
    registrarEmail: Optional[str] = None
    registrarPhone: Optional[str] = None
    notes: Optional[str] = None
    evidenceUrls: List[str] = field(default_factory=list)
    updatedAt: str = ""

@dataclass
class TimelineEntry:
    at: str = ""
    by: str = ""
    action: str = ""

@dataclass
class VerificationRequest:
    id: str = ""
    companyId: str = ""
    candidateId: str = ""
    status: str = "PAYMENT_PENDING"
    fee: int = 0
    payment: Payment = field(default_factory=Payment)
    check: VerificationCheck = field(default_factory=VerificationCheck)
    createdBy: str = ""
    createdAt: str = ""
    # Computed once at creation from the company's SLA; never recomputed
    dueAt: str = ""
    # Append-only
    timeline: List[TimelineEntry] = field(default_factory=list)
    rejectionReason: Optional[str] = None

@dataclass
class Receipt:
    requestId: str = ""
    companyName: str = ""
    amount: int = 0
    currency: str = "INR"
    method: Optional[str] = None
    txnId: str = ""
    paidAt: str = ""


# ---------------------------------------------------------------------------
# Partial updates. A field left as None is "not provided" and keeps its value.
# ---------------------------------------------------------------------------

@dataclass
class PaymentPatch:
    status: Optional[str] = None
    txnId: Optional[str] = None
    paidAt: Optional[str] = None
    method: Optional[str] = None

@dataclass
class CheckPatch:
    substatus: Optional[str] = None
    registrarEmail: Optional[str] = None
    registrarPhone: Optional[str] = None
    notes: Optional[str] = None
    evidenceUrls: Optional[List[str]] = None

@dataclass
class RequestPatch:
    """
    Merge rules: scalar fields overwrite; `payment` and `check` are merged
    field by field into the embedded objects, never replaced wholesale.
    id / createdAt / dueAt / timeline are deliberately absent.
    """
    candidateId: Optional[str] = None
    status: Optional[str] = None
    fee: Optional[int] = None
    createdBy: Optional[str] = None
    rejectionReason: Optional[str] = None
    payment: Optional[PaymentPatch] = None
    check: Optional[CheckPatch] = None

@dataclass
class CompanyPatch:
    companyName: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    contactNumber: Optional[str] = None
    address: Optional[str] = None
    brandLogo: Optional[str] = None
    slaDays: Optional[int] = None


def apply_patch(target, patch) -> list:
    """
    Copy every non-None scalar field of `patch` onto `target`.
    Returns the names of the fields that were written.
    """
    written = []
    for f in dc_fields(patch):
        val = getattr(patch, f.name)
        if val is None or not hasattr(target, f.name):
            continue
        setattr(target, f.name, list(val) if isinstance(val, list) else val)
        written.append(f.name)
    return written


# ---------------------------------------------------------------------------
# JSON <-> record
# ---------------------------------------------------------------------------

def _drop_none(obj):
    if isinstance(obj, dict):
        return {k: _drop_none(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [_drop_none(v) for v in obj]
    return obj


def to_dict(record) -> Dict[str, Any]:
    """Record -> JSON-ready dict. Unset optionals are omitted, like undefined fields."""
    return _drop_none(asdict(record))


def _filter_kwargs(cls, data: dict) -> dict:
    """Drop unknown fields so cls(**kwargs) never explodes on legacy documents."""
    allowed = {f.name for f in dc_fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in allowed}


def from_dict(cls, data: dict):
    return cls(**_filter_kwargs(cls, data))


def session_from_dict(data: dict) -> AuthSession:
    data = data or {}
    return AuthSession(
        user=from_dict(User, data.get("user") or {}),
        company=from_dict(Company, data.get("company") or {}),
    )


def request_from_dict(data: dict) -> VerificationRequest:
    d = _filter_kwargs(VerificationRequest, data)
    d["payment"] = from_dict(Payment, d.get("payment") or {})
    d["check"] = from_dict(VerificationCheck, d.get("check") or {})
    d["timeline"] = [from_dict(TimelineEntry, t) for t in (d.get("timeline") or [])]
    return VerificationRequest(**d)
