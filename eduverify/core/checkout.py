from typing import Optional

from eduverify.core import state_machine as sm
from eduverify.store.models import PaymentPatch
from eduverify.services.errors import ValidationError
from eduverify.observability.logging import log


def checkout(services, request_id: str, method: str, token: Optional[str] = None) -> dict:
    """
    Order -> pay -> record the outcome on the request.
    A declined payment is recorded too ("Payment failed"), status unchanged.
    """
    request = services.requests.get(request_id)
    if request.payment.status == sm.PAID:
        raise ValidationError("Request already paid")

    order = services.payments.create_order(request.id, request.fee)
    result = services.payments.pay(order["orderId"], method)

    updated = services.requests.update_payment(
        request.id,
        PaymentPatch(
            status=result["status"],
            txnId=result.get("txnId"),
            paidAt=result.get("paidAt"),
            method=method,
        ),
        token=token,
    )
    log(event="checkout_done", requestId=request.id, orderId=order["orderId"], status=result["status"])
    return {"orderId": order["orderId"], "payment": result, "request": updated}
