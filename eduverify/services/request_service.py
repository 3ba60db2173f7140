import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from eduverify.settings import settings
from eduverify.store.keys import KEYS
from eduverify.store.models import (
    CheckPatch,
    Payment,
    PaymentPatch,
    RequestPatch,
    TimelineEntry,
    VerificationCheck,
    VerificationRequest,
    apply_patch,
    request_from_dict,
    to_dict,
)
from eduverify.core import state_machine as sm
from eduverify.services.errors import InvalidTransitionError, NotFoundError, ValidationError
from eduverify.utils.ids import new_id
from eduverify.utils.time import Clock, add_days, parse_iso, simulate_latency, to_iso, utc_now
from eduverify.observability.logging import log

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class RequestService:
    """
    Verification requests and their lifecycle. Every mutation is a
    read-modify-write of the whole persisted list under the collection lock.
    """

    def __init__(self, storage, auth, keys=KEYS, clock: Clock = utc_now, sleep=time.sleep):
        self.storage = storage
        self.auth = auth
        self.keys = keys
        self.clock = clock
        self.sleep = sleep

    # -- helpers -----------------------------------------------------------

    def _raw(self) -> list:
        return self.storage.get(self.keys.REQUESTS) or []

    def _guard(self, current: str, target: str) -> None:
        if settings.ENFORCE_STATUS_TRANSITIONS and not sm.is_allowed(current, target):
            raise InvalidTransitionError(f"Cannot change status from {current} to {target}")

    def _mutate(self, request_id: str, fn: Callable[[VerificationRequest], None]) -> VerificationRequest:
        with self.storage.lock(self.keys.REQUESTS):
            requests = self._raw()
            index = next((i for i, r in enumerate(requests) if r.get("id") == request_id), -1)
            if index == -1:
                raise NotFoundError("Request not found")
            request = request_from_dict(requests[index])
            fn(request)
            requests[index] = to_dict(request)
            self.storage.set(self.keys.REQUESTS, requests)
        return request

    def _append(self, request: VerificationRequest, by: str, action: str) -> None:
        request.timeline.append(TimelineEntry(at=to_iso(self.clock()), by=by, action=action))

    # -- reads -------------------------------------------------------------

    def list(
        self,
        status: Optional[str] = None,
        university: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[VerificationRequest]:
        """
        Newest first. `university` and `search` join against the candidate list;
        `search` matches request id, candidate name or university (case-insensitive).
        """
        simulate_latency(settings.LATENCY_LIST_MS, self.sleep)
        requests = self._raw()

        if status:
            requests = [r for r in requests if r.get("status") == status]
        if date_from:
            requests = [r for r in requests if (r.get("createdAt") or "") >= date_from]
        if date_to:
            requests = [r for r in requests if (r.get("createdAt") or "") <= date_to]

        if university or search:
            candidates = {c.get("id"): c for c in (self.storage.get(self.keys.CANDIDATES) or [])}
            if university:
                needle = university.lower()
                requests = [
                    r for r in requests
                    if needle in ((candidates.get(r.get("candidateId")) or {}).get("universityName") or "").lower()
                ]
            if search:
                q = search.lower()

                def _hit(r):
                    c = candidates.get(r.get("candidateId")) or {}
                    return (
                        q in (r.get("id") or "").lower()
                        or q in (c.get("fullName") or "").lower()
                        or q in (c.get("universityName") or "").lower()
                    )

                requests = [r for r in requests if _hit(r)]

        out = [request_from_dict(r) for r in requests]
        out.sort(key=lambda r: parse_iso(r.createdAt) or _EPOCH, reverse=True)
        return out

    def get(self, request_id: str) -> VerificationRequest:
        simulate_latency(settings.LATENCY_GET_MS, self.sleep)
        for r in self._raw():
            if r.get("id") == request_id:
                return request_from_dict(r)
        raise NotFoundError("Request not found")

    # -- writes ------------------------------------------------------------

    def create(self, candidate_id: str, token: Optional[str] = None) -> VerificationRequest:
        """
        New request in PAYMENT_PENDING for the caller's company. dueAt is fixed
        here from the company's SLA and never recomputed. The candidate id is
        not checked against the candidate list.
        """
        simulate_latency(settings.LATENCY_WRITE_MS, self.sleep)
        session = self.auth.me(token)
        now = self.clock()
        created_at = to_iso(now)
        fee = settings.VERIFICATION_FEE

        request_id = new_id("REQ")
        request = VerificationRequest(
            id=request_id,
            companyId=session.company.id,
            candidateId=candidate_id,
            status=sm.PAYMENT_PENDING,
            fee=fee,
            payment=Payment(amount=fee, currency=settings.CURRENCY, status=sm.NOT_PAID),
            check=VerificationCheck(
                id=new_id("check-"),
                requestId=request_id,
                type="EDUCATION",
                substatus=sm.CHECK_NOT_STARTED,
                evidenceUrls=[],
                updatedAt=created_at,
            ),
            createdBy=session.user.id,
            createdAt=created_at,
            dueAt=to_iso(add_days(now, session.company.slaDays)),
            timeline=[TimelineEntry(at=created_at, by=session.user.name, action="Request created")],
        )

        with self.storage.lock(self.keys.REQUESTS):
            requests = self._raw()
            requests.append(to_dict(request))
            self.storage.set(self.keys.REQUESTS, requests)

        log(event="request_created", requestId=request.id, companyId=request.companyId, dueAt=request.dueAt)
        return request

    def update(self, request_id: str, patch: RequestPatch) -> VerificationRequest:
        """
        Partial update. Scalars overwrite; nested payment/check patches merge into
        the embedded objects. No timeline entry is written.
        """
        simulate_latency(settings.LATENCY_WRITE_MS, self.sleep)

        def _apply(request: VerificationRequest) -> None:
            if patch.status is not None:
                if patch.status not in sm.REQUEST_STATUSES:
                    raise ValidationError(f"Unknown status: {patch.status}")
                self._guard(request.status, patch.status)
            for name in ("candidateId", "status", "fee", "createdBy", "rejectionReason"):
                val = getattr(patch, name)
                if val is not None:
                    setattr(request, name, val)
            if patch.payment is not None:
                apply_patch(request.payment, patch.payment)
            if patch.check is not None:
                if apply_patch(request.check, patch.check):
                    request.check.updatedAt = to_iso(self.clock())

        return self._mutate(request_id, _apply)

    def set_status(
        self, request_id: str, status: str, reason: Optional[str] = None, token: Optional[str] = None
    ) -> VerificationRequest:
        """
        Overwrite the status and log it. REJECTED requires a reason; without one
        nothing is persisted. Source state is only checked when the policy table
        is enforced.
        """
        if status not in sm.REQUEST_STATUSES:
            raise ValidationError(f"Unknown status: {status}")
        if status == sm.REJECTED and not (reason or "").strip():
            raise ValidationError("Rejection reason is required")

        simulate_latency(settings.LATENCY_WRITE_MS, self.sleep)
        actor = self.auth.me(token).user

        def _apply(request: VerificationRequest) -> None:
            self._guard(request.status, status)
            previous = request.status
            request.status = status
            if status == sm.REJECTED:
                request.rejectionReason = reason
            self._append(request, actor.name, f"Status changed to {status}")
            log(event="request_status_changed", requestId=request.id, previous=previous,
                status=status, by=actor.id)

        return self._mutate(request_id, _apply)

    def update_payment(
        self, request_id: str, payment: PaymentPatch, token: Optional[str] = None
    ) -> VerificationRequest:
        """
        Merge a gateway result into the embedded payment.
        PAID moves the request to IN_PROGRESS; FAILED leaves the status alone.
        Either way exactly one timeline entry is appended. A request that is
        already PAID refuses any further payment update.
        """
        if payment.status not in (sm.PAID, sm.FAILED):
            raise ValidationError("Payment status must be PAID or FAILED")

        simulate_latency(settings.LATENCY_WRITE_MS, self.sleep)
        actor = self.auth.me(token).user

        def _apply(request: VerificationRequest) -> None:
            # Re-read under the collection lock, so concurrent checkouts charge once
            if request.payment.status == sm.PAID:
                raise ValidationError("Request already paid")
            if payment.status == sm.PAID:
                self._guard(request.status, sm.IN_PROGRESS)
            apply_patch(request.payment, payment)
            if payment.status == sm.PAID:
                request.status = sm.IN_PROGRESS
                self._append(request, actor.name, f"Payment successful - ₹{request.fee}")
            else:
                self._append(request, actor.name, "Payment failed")
            log(event="request_payment_updated", requestId=request.id, paymentStatus=payment.status,
                txnId=payment.txnId, status=request.status)

        return self._mutate(request_id, _apply)

    def update_check(self, request_id: str, patch: CheckPatch) -> VerificationRequest:
        """Verifier-side edits of the embedded check; stamps check.updatedAt."""
        if patch.substatus is not None and patch.substatus not in sm.CHECK_SUBSTATUSES:
            raise ValidationError(f"Unknown substatus: {patch.substatus}")
        return self.update(request_id, RequestPatch(check=patch))
