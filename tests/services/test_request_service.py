import pytest
from unittest.mock import patch
from eduverify.core import state_machine as sm
from eduverify.services.errors import AuthError, InvalidTransitionError, NotFoundError, ValidationError
from eduverify.store.keys import KEYS
from eduverify.store.models import CheckPatch, CompanyPatch, PaymentPatch, RequestPatch
from eduverify.settings import settings
from eduverify.utils.time import parse_iso

PAID = PaymentPatch(status="PAID", txnId="TXN1", paidAt="2024-01-01T00:00:00Z", method="UPI")


def test_create_request_initial_state(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)

    assert r.status == "PAYMENT_PENDING"
    assert r.fee == 500
    assert r.payment.amount == 500
    assert r.payment.currency == "INR"
    assert r.payment.status == "NOT_PAID"
    assert r.check.substatus == "NOT_STARTED"
    assert r.companyId == "company-1"
    assert r.createdBy == "user-1"
    assert len(r.timeline) == 1
    assert r.timeline[0].action == "Request created"
    assert r.timeline[0].by == "Demo Employer"

def test_due_at_is_created_at_plus_sla_days(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    delta = parse_iso(r.dueAt) - parse_iso(r.createdAt)
    assert delta.days == 5 and delta.seconds == 0
    assert r.createdAt == "2024-01-01T00:00:00.000Z"
    assert r.dueAt == "2024-01-06T00:00:00.000Z"

def test_due_at_uses_company_sla_and_is_never_recomputed(services, employer_token, jane):
    services.auth.update_company(employer_token, CompanyPatch(slaDays=3))
    r = services.requests.create(jane.id, token=employer_token)
    assert r.dueAt == "2024-01-04T00:00:00.000Z"

    services.auth.update_company(employer_token, CompanyPatch(slaDays=20))
    services.requests.set_status(r.id, "IN_PROGRESS", token=employer_token)
    assert services.requests.get(r.id).dueAt == "2024-01-04T00:00:00.000Z"

def test_check_request_id_matches_request_id(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    assert r.id.startswith("REQ")
    assert r.check.requestId == r.id
    assert r.check.id.startswith("check-")

def test_create_requires_session(services, jane):
    with pytest.raises(AuthError, match="Not authenticated"):
        services.requests.create(jane.id)

def test_create_accepts_orphan_candidate_id(services, employer_token):
    r = services.requests.create("candidate-does-not-exist", token=employer_token)
    assert services.requests.get(r.id).candidateId == "candidate-does-not-exist"

def test_update_payment_paid(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    out = services.requests.update_payment(r.id, PAID, token=employer_token)

    assert out.status == "IN_PROGRESS"
    assert out.payment.status == "PAID"
    assert out.payment.txnId == "TXN1"
    assert out.payment.amount == 500  # merged, not replaced
    assert len(out.timeline) == 2
    assert "₹500" in out.timeline[1].action

def test_update_payment_failed_keeps_status(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    out = services.requests.update_payment(r.id, PaymentPatch(status="FAILED", txnId="TXN2"), token=employer_token)

    assert out.status == "PAYMENT_PENDING"
    assert out.payment.status == "FAILED"
    assert len(out.timeline) == 2
    assert out.timeline[1].action == "Payment failed"

def test_update_payment_rejects_other_statuses(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    with pytest.raises(ValidationError):
        services.requests.update_payment(r.id, PaymentPatch(status="NOT_PAID"), token=employer_token)

def test_set_status_rejected_with_reason(services, verifier_token, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    out = services.requests.set_status(r.id, "REJECTED", "Degree not found in registry", token=verifier_token)

    assert out.status == "REJECTED"
    assert out.rejectionReason == "Degree not found in registry"
    assert len(out.timeline) == 2
    assert out.timeline[1].action == "Status changed to REJECTED"
    assert out.timeline[1].by == "Demo Verifier"

@pytest.mark.parametrize("reason", [None, "", "   "])
def test_set_status_rejected_without_reason_is_noop(services, employer_token, jane, reason):
    r = services.requests.create(jane.id, token=employer_token)
    with pytest.raises(ValidationError):
        services.requests.set_status(r.id, "REJECTED", reason, token=employer_token)
    after = services.requests.get(r.id)
    assert after.status == "PAYMENT_PENDING"
    assert len(after.timeline) == 1

def test_reason_ignored_for_non_rejection(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    out = services.requests.set_status(r.id, "VERIFIED", "looks fine", token=employer_token)
    assert out.rejectionReason is None

def test_permissive_transitions_by_default(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    services.requests.set_status(r.id, "VERIFIED", token=employer_token)
    out = services.requests.set_status(r.id, "DRAFT", token=employer_token)
    assert out.status == "DRAFT"
    assert [t.action for t in out.timeline][-2:] == ["Status changed to VERIFIED", "Status changed to DRAFT"]

def test_enforced_transitions(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    with patch.object(settings, "ENFORCE_STATUS_TRANSITIONS", True):
        with pytest.raises(InvalidTransitionError) as exc:
            services.requests.set_status(r.id, "VERIFIED", token=employer_token)
        assert str(exc.value) == "Cannot change status from PAYMENT_PENDING to VERIFIED"

        services.requests.update_payment(r.id, PAID, token=employer_token)
        out = services.requests.set_status(r.id, "VERIFIED", token=employer_token)
        assert out.status == "VERIFIED"

        with pytest.raises(InvalidTransitionError):
            services.requests.set_status(r.id, "IN_PROGRESS", token=employer_token)
    assert services.requests.get(r.id).status == "VERIFIED"

def test_unknown_request(services, employer_token):
    with pytest.raises(NotFoundError, match="Request not found"):
        services.requests.get("REQ-missing")
    with pytest.raises(NotFoundError):
        services.requests.set_status("REQ-missing", "VERIFIED", token=employer_token)
    with pytest.raises(NotFoundError):
        services.requests.update_payment("REQ-missing", PAID, token=employer_token)

def test_update_merges_nested_objects(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    out = services.requests.update(r.id, RequestPatch(
        payment=PaymentPatch(method="Card"),
        check=CheckPatch(notes="Registrar emailed"),
    ))
    assert out.payment.method == "Card"
    assert out.payment.amount == 500
    assert out.payment.status == "NOT_PAID"
    assert out.check.notes == "Registrar emailed"
    assert out.check.requestId == r.id
    assert out.dueAt == r.dueAt
    assert len(out.timeline) == 1

def test_update_check(services, verifier_token, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    out = services.requests.update_check(r.id, CheckPatch(
        substatus="VERIFIED",
        registrarEmail="registrar@unipune.ac.in",
        evidenceUrls=["mock-url-2-letter.pdf"],
    ))
    assert out.check.substatus == "VERIFIED"
    assert out.check.evidenceUrls == ["mock-url-2-letter.pdf"]
    # substatus is independent of the request status
    assert out.status == "PAYMENT_PENDING"

def test_update_check_rejects_unknown_substatus(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    with pytest.raises(ValidationError):
        services.requests.update_check(r.id, CheckPatch(substatus="DONE"))

def test_list_newest_first_and_filters(services, storage, employer_token, jane):
    other = services.candidates.create({
        "fullName": "Arjun Mehta", "mobile": "+919800000002", "email": "arjun@example.com",
        "degreeName": "MBA", "universityName": "Delhi University", "documentUrls": [],
    })
    a = services.requests.create(jane.id, token=employer_token)
    b = services.requests.create(other.id, token=employer_token)

    # spread createdAt so ordering is observable
    docs = storage.get(KEYS.REQUESTS)
    docs[0]["createdAt"] = "2024-01-01T00:00:00.000Z"
    docs[1]["createdAt"] = "2024-02-01T00:00:00.000Z"
    storage.set(KEYS.REQUESTS, docs)

    assert [r.id for r in services.requests.list()] == [b.id, a.id]
    assert [r.id for r in services.requests.list(university="delhi")] == [b.id]
    assert [r.id for r in services.requests.list(search="jane")] == [a.id]
    assert [r.id for r in services.requests.list(date_from="2024-01-15")] == [b.id]
    assert [r.id for r in services.requests.list(date_to="2024-01-15")] == [a.id]

    services.requests.update_payment(a.id, PAID, token=employer_token)
    assert [r.id for r in services.requests.list(status="IN_PROGRESS")] == [a.id]

def test_jane_doe_scenario(services, employer_token):
    cand = services.candidates.create({
        "fullName": "Jane Doe", "mobile": "+919800000001", "email": "jane@example.com",
        "degreeName": "B.Com", "universityName": "University of Mumbai", "documentUrls": [],
    })
    req = services.requests.create(cand.id, token=employer_token)
    assert req.status == sm.PAYMENT_PENDING

    services.requests.update_payment(req.id, PAID, token=employer_token)

    req = services.requests.get(req.id)
    assert req.status == sm.IN_PROGRESS
    assert len(req.timeline) == 2
    assert "₹500" in req.timeline[1].action

def test_second_payment_on_paid_request_is_refused(services, employer_token, jane):
    r = services.requests.create(jane.id, token=employer_token)
    services.requests.update_payment(r.id, PAID, token=employer_token)

    with pytest.raises(ValidationError, match="Request already paid"):
        services.requests.update_payment(r.id, PAID, token=employer_token)
    with pytest.raises(ValidationError):
        services.requests.update_payment(r.id, PaymentPatch(status="FAILED"), token=employer_token)

    after = services.requests.get(r.id)
    assert after.payment.status == "PAID"
    assert len(after.timeline) == 2
