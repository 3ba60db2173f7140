"""
Seed a few candidates and verification requests for the demo employer so the
dashboard has something to show. Safe to run repeatedly: each run adds a new batch.
"""
import random

from eduverify.container import build_services
from eduverify.store.models import PaymentPatch
from eduverify.store.storage import get_storage
from eduverify.utils.time import to_iso, utc_now

DEMO_EMAIL = "employer@demo"
DEMO_PASSWORD = "demo123"

CANDIDATES = [
    {
        "fullName": "Jane Doe",
        "mobile": "+919800000001",
        "email": "jane.doe@example.com",
        "degreeName": "B.Tech Computer Science",
        "universityName": "University of Mumbai",
        "graduationYear": 2021,
        "documentUrls": [],
    },
    {
        "fullName": "Arjun Mehta",
        "mobile": "+919800000002",
        "email": "arjun.mehta@example.com",
        "degreeName": "MBA",
        "universityName": "Delhi University",
        "enrollmentOrRollNo": "DU-2019-4411",
        "graduationYear": 2019,
        "documentUrls": [],
    },
]


def main(storage=None):
    services = build_services(storage or get_storage(), sleep=lambda _s: None, rng=random.Random(7))
    token = services.auth.login(DEMO_EMAIL, DEMO_PASSWORD)["token"]

    created = []
    for i, payload in enumerate(CANDIDATES):
        candidate = services.candidates.create(payload)
        request = services.requests.create(candidate.id, token=token)
        if i == 0:
            request = services.requests.update_payment(
                request.id, PaymentPatch(status="PAID", txnId="TXN-SEED", paidAt=to_iso(utc_now()), method="UPI"), token=token
            )
        created.append(request)

    services.auth.logout(token)
    for r in created:
        print(f"OK: {r.id} candidate={r.candidateId} status={r.status}")
    return created


if __name__ == "__main__":
    main()
