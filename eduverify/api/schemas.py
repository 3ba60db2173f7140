import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

ManualStatus = Literal["IN_PROGRESS", "VERIFIED", "REJECTED"]
PaymentResult = Literal["PAID", "FAILED"]
PaymentMethod = Literal["UPI", "Card", "NetBanking"]
CheckSubstatus = Literal["NOT_STARTED", "IN_PROGRESS", "VERIFIED", "ISSUE"]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^[+]?[\d\s()-]{10,}$")
_URL_RE = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


def _check_email(v: str) -> str:
    if not _EMAIL_RE.match(v or ""):
        raise ValueError("Invalid email address")
    return v


def _check_phone(v: str) -> str:
    if not _PHONE_RE.match(v or ""):
        raise ValueError("Invalid phone number")
    return v


def _check_url(v: Optional[str]) -> Optional[str]:
    # The signup form submits "" for an empty website
    if v in (None, ""):
        return None
    if not _URL_RE.match(v):
        raise ValueError("Invalid URL")
    return v


class FileMeta(BaseModel):
    name: str = Field(min_length=1)
    size: int = Field(ge=0)
    type: str


class LoginRequest(BaseModel):
    # Demo accounts ("employer@demo") are not RFC-valid addresses, so no format check here
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    role: Literal["EMPLOYER", "VERIFIER"]
    userId: str


class SignupRequest(BaseModel):
    companyName: str = Field(min_length=2)
    email: str
    password: str = Field(min_length=6)
    website: Optional[str] = None
    contactNumber: str
    address: str = Field(min_length=10)
    companyCertificate: Optional[FileMeta] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("contactNumber")
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return _check_url(v)


class CompanySettingsRequest(BaseModel):
    companyName: Optional[str] = Field(default=None, min_length=2)
    email: Optional[str] = None
    website: Optional[str] = None
    contactNumber: Optional[str] = None
    address: Optional[str] = Field(default=None, min_length=10)
    slaDays: Optional[int] = Field(default=None, ge=1)
    logo: Optional[FileMeta] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return v if v is None else _check_email(v)

    @field_validator("contactNumber")
    @classmethod
    def validate_phone(cls, v):
        return v if v is None else _check_phone(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return _check_url(v)


class NewCandidateRequest(BaseModel):
    fullName: str = Field(min_length=1)
    mobile: str
    email: str
    degreeName: str = Field(min_length=1)
    pcNumber: Optional[str] = None
    initials: Optional[str] = None
    universityName: str = Field(min_length=1)
    enrollmentOrRollNo: Optional[str] = None
    graduationYear: Optional[int] = Field(default=None, ge=1900, le=2100)
    documentUrls: List[str] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)


class NewRequestRequest(BaseModel):
    """Either an existing candidate id, or a candidate to create first."""
    candidateId: Optional[str] = None
    candidate: Optional[NewCandidateRequest] = None

    @model_validator(mode="after")
    def check_candidate_source(self):
        if bool(self.candidateId) == (self.candidate is not None):
            raise ValueError("Provide exactly one of candidateId or candidate")
        return self


class StatusChangeRequest(BaseModel):
    status: ManualStatus
    reason: Optional[str] = None


class PaymentUpdateRequest(BaseModel):
    status: PaymentResult
    txnId: Optional[str] = None
    paidAt: Optional[str] = None
    method: Optional[PaymentMethod] = None


class CheckUpdateRequest(BaseModel):
    substatus: Optional[CheckSubstatus] = None
    registrarEmail: Optional[str] = None
    registrarPhone: Optional[str] = None
    notes: Optional[str] = None
    evidenceUrls: Optional[List[str]] = None


class CheckoutRequest(BaseModel):
    method: PaymentMethod = "UPI"


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
