from typing import Optional

from eduverify.container import get_services
from eduverify.core.checkout import checkout
from eduverify.queue.rq_conn import get_queue
from eduverify.observability.logging import log


def process_checkout_job(request_id: str, method: str, token: Optional[str] = None) -> dict:
    """
    Background checkout (CHECKOUT_MODE=rq). Failures propagate so RQ marks the job failed.
    """
    try:
        log(event="checkout_job_start", requestId=request_id, method=method)
        out = checkout(get_services(), request_id, method, token=token)
        return {"requestId": request_id, "status": out["payment"]["status"], "txnId": out["payment"]["txnId"]}
    except Exception as e:
        log(event="checkout_job_exception", requestId=request_id, error=str(e))
        raise


def enqueue_checkout(request_id: str, method: str, token: Optional[str] = None) -> str:
    job = get_queue().enqueue(process_checkout_job, request_id, method, token)
    log(event="checkout_enqueued", requestId=request_id, jobId=job.id)
    return job.id
