import random
from datetime import datetime, timezone

import pytest

from eduverify.container import build_services
from eduverify.store.storage import MemoryStorage

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def services(storage):
    # Frozen clock and no sleeping; the gateway always approves
    return build_services(
        storage,
        clock=lambda: FIXED_NOW,
        sleep=lambda _s: None,
        rng=random.Random(0),
        success_rate=1.0,
    )


@pytest.fixture
def employer_token(services):
    return services.auth.login("employer@demo", "demo123")["token"]


@pytest.fixture
def verifier_token(services):
    return services.auth.login("verifier@demo", "demo123")["token"]


@pytest.fixture
def jane(services):
    return services.candidates.create({
        "fullName": "Jane Doe",
        "mobile": "+919800000001",
        "email": "jane@example.com",
        "degreeName": "B.Sc Physics",
        "universityName": "University of Pune",
        "graduationYear": 2020,
        "documentUrls": ["mock-url-1-marksheet.pdf"],
    })
