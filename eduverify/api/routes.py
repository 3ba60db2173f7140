from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from eduverify.api.auth import require_token
from eduverify.api.schemas import (
    CheckoutRequest,
    CheckUpdateRequest,
    FileMeta,
    NewCandidateRequest,
    NewRequestRequest,
    PaymentUpdateRequest,
    StatusChangeRequest,
)
from eduverify.container import Services, get_services
from eduverify.core import state_machine as sm
from eduverify.core.checkout import checkout
from eduverify.core.dashboard import dashboard_stats, is_overdue
from eduverify.core.export import export_csv
from eduverify.queue.jobs import enqueue_checkout
from eduverify.services.errors import NotFoundError, ValidationError
from eduverify.services.file_service import FileInfo
from eduverify.settings import settings
from eduverify.store.models import CheckPatch, PaymentPatch, to_dict
from eduverify.utils.time import now_ms

router = APIRouter(dependencies=[Depends(require_token)])


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------

@router.get("/candidates")
def list_candidates(services: Services = Depends(get_services)):
    return [to_dict(c) for c in services.candidates.list()]


@router.post("/candidates", status_code=201)
def create_candidate(body: NewCandidateRequest, services: Services = Depends(get_services)):
    return to_dict(services.candidates.create(body.model_dump()))


@router.get("/candidates/{candidate_id}")
def get_candidate(candidate_id: str, services: Services = Depends(get_services)):
    return to_dict(services.candidates.get(candidate_id))


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

def _filters(
    status: Optional[str] = None,
    university: Optional[str] = None,
    dateFrom: Optional[str] = None,
    dateTo: Optional[str] = None,
    search: Optional[str] = None,
) -> dict:
    return {
        "status": status,
        "university": university,
        "date_from": dateFrom,
        "date_to": dateTo,
        "search": search,
    }


@router.get("/requests")
def list_requests(filters: dict = Depends(_filters), services: Services = Depends(get_services)):
    return [to_dict(r) for r in services.requests.list(**filters)]


@router.get("/requests/export.csv")
def export_requests(filters: dict = Depends(_filters), services: Services = Depends(get_services)):
    requests = services.requests.list(**filters)
    candidates = {c.id: c for c in services.candidates.list()}
    return Response(
        content=export_csv(requests, candidates),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="requests-{now_ms()}.csv"'},
    )


@router.post("/requests", status_code=201)
def create_request(
    body: NewRequestRequest,
    token: str = Depends(require_token),
    services: Services = Depends(get_services),
):
    """NewRequest flow: optionally create the candidate, then the request."""
    candidate_id = body.candidateId
    if body.candidate is not None:
        candidate_id = services.candidates.create(body.candidate.model_dump()).id
    return to_dict(services.requests.create(candidate_id, token=token))


@router.get("/requests/{request_id}")
def get_request(request_id: str, services: Services = Depends(get_services)):
    request = services.requests.get(request_id)
    try:
        candidate = to_dict(services.candidates.get(request.candidateId))
    except NotFoundError:
        # candidateId is never validated; orphans render without candidate details
        candidate = None
    return {"request": to_dict(request), "candidate": candidate, "isOverdue": is_overdue(request)}


@router.patch("/requests/{request_id}/status")
def set_status(
    request_id: str,
    body: StatusChangeRequest,
    token: str = Depends(require_token),
    services: Services = Depends(get_services),
):
    return to_dict(services.requests.set_status(request_id, body.status, body.reason, token=token))


@router.patch("/requests/{request_id}/payment")
def update_payment(
    request_id: str,
    body: PaymentUpdateRequest,
    token: str = Depends(require_token),
    services: Services = Depends(get_services),
):
    patch = PaymentPatch(**body.model_dump())
    return to_dict(services.requests.update_payment(request_id, patch, token=token))


@router.patch("/requests/{request_id}/check")
def update_check(request_id: str, body: CheckUpdateRequest, services: Services = Depends(get_services)):
    return to_dict(services.requests.update_check(request_id, CheckPatch(**body.model_dump())))


@router.post("/requests/{request_id}/checkout")
def checkout_request(
    request_id: str,
    body: CheckoutRequest,
    token: str = Depends(require_token),
    services: Services = Depends(get_services),
):
    if settings.CHECKOUT_MODE == "rq":
        if services.requests.get(request_id).payment.status == sm.PAID:
            raise ValidationError("Request already paid")
        job_id = enqueue_checkout(request_id, body.method, token)
        return JSONResponse(status_code=202, content={"status": "queued", "jobId": job_id})

    out = checkout(services, request_id, body.method, token=token)
    return {"orderId": out["orderId"], "payment": out["payment"], "request": to_dict(out["request"])}


@router.get("/requests/{request_id}/receipt")
def get_receipt(request_id: str, services: Services = Depends(get_services)):
    return to_dict(services.payments.get_receipt(request_id))


# ---------------------------------------------------------------------------
# Files & dashboard
# ---------------------------------------------------------------------------

@router.post("/files", status_code=201)
def upload_file(body: FileMeta, services: Services = Depends(get_services)):
    info = FileInfo(name=body.name, size=body.size, type=body.type)
    error = services.files.validate_file(info)
    if error:
        raise ValidationError(error)
    return services.files.upload(info)


@router.get("/dashboard")
def dashboard(services: Services = Depends(get_services)):
    stats = dashboard_stats(services.requests.list())
    stats["recent"] = [
        {**to_dict(r), "isOverdue": is_overdue(r)} for r in stats["recent"]
    ]
    return stats
