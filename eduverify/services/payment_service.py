import random
import time
from typing import Optional

from eduverify.settings import settings
from eduverify.store.keys import KEYS
from eduverify.store.models import Company, Receipt, from_dict
from eduverify.core import state_machine as sm
from eduverify.services.auth_service import DEMO_COMPANY
from eduverify.services.errors import NotFoundError, ValidationError
from eduverify.utils.ids import new_id
from eduverify.utils.time import Clock, simulate_latency, to_iso, utc_now
from eduverify.observability.logging import log


class PaymentService:
    """
    Mock gateway. Success probability, RNG and clock are injectable so tests
    can pin the outcome.
    """

    def __init__(
        self,
        storage,
        keys=KEYS,
        success_rate: Optional[float] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = utc_now,
        sleep=time.sleep,
    ):
        self.storage = storage
        self.keys = keys
        self.success_rate = settings.PAYMENT_SUCCESS_RATE if success_rate is None else float(success_rate)
        self.rng = rng or random.Random()
        self.clock = clock
        self.sleep = sleep

    def create_order(self, request_id: str, amount: int) -> dict:
        simulate_latency(settings.LATENCY_ORDER_MS, self.sleep)
        order = {"orderId": new_id("order-"), "amount": amount, "currency": settings.CURRENCY}
        log(event="payment_order_created", requestId=request_id, orderId=order["orderId"], amount=amount)
        return order

    def pay(self, order_id: str, method: str) -> dict:
        if method not in sm.PAYMENT_METHODS:
            raise ValidationError(f"Payment method must be one of: {', '.join(sm.PAYMENT_METHODS)}")

        simulate_latency(settings.LATENCY_PAY_MS, self.sleep)
        ok = self.rng.random() < self.success_rate
        result = {"txnId": new_id("TXN"), "status": sm.PAID if ok else sm.FAILED}
        if ok:
            result["paidAt"] = to_iso(self.clock())

        log(event="payment_attempt", orderId=order_id, method=method, status=result["status"],
            txnId=result["txnId"])
        return result

    def get_receipt(self, request_id: str) -> Receipt:
        """Receipt for a PAID request, built from the persisted request and its company."""
        simulate_latency(settings.LATENCY_GET_MS, self.sleep)

        request = next(
            (r for r in (self.storage.get(self.keys.REQUESTS) or []) if r.get("id") == request_id), None
        )
        if request is None:
            raise NotFoundError("Request not found")

        payment = request.get("payment") or {}
        if payment.get("status") != sm.PAID:
            raise ValidationError("Receipt not available")

        company_name = ""
        for c in self.storage.get(self.keys.COMPANIES) or []:
            if c.get("id") == request.get("companyId"):
                company_name = from_dict(Company, c).companyName
                break
        if not company_name:
            # Demo company lives outside the persisted list until its settings are saved
            if request.get("companyId") == DEMO_COMPANY.id:
                company_name = DEMO_COMPANY.companyName

        return Receipt(
            requestId=request_id,
            companyName=company_name,
            amount=int(payment.get("amount") or request.get("fee") or 0),
            currency=payment.get("currency") or settings.CURRENCY,
            method=payment.get("method"),
            txnId=payment.get("txnId") or "",
            paidAt=payment.get("paidAt") or "",
        )
