import random
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from eduverify.store.keys import KEYS, Keys
from eduverify.store.storage import Storage, get_storage
from eduverify.services.auth_service import AuthService
from eduverify.services.candidate_service import CandidateService
from eduverify.services.request_service import RequestService
from eduverify.services.payment_service import PaymentService
from eduverify.services.file_service import FileService
from eduverify.utils.time import Clock, utc_now


@dataclass
class Services:
    storage: Storage
    auth: AuthService
    candidates: CandidateService
    requests: RequestService
    payments: PaymentService
    files: FileService


def build_services(
    storage: Storage,
    keys: Keys = KEYS,
    clock: Clock = utc_now,
    sleep=time.sleep,
    rng: Optional[random.Random] = None,
    success_rate: Optional[float] = None,
) -> Services:
    """Wire every service around one storage instance."""
    auth = AuthService(storage, keys=keys, sleep=sleep)
    return Services(
        storage=storage,
        auth=auth,
        candidates=CandidateService(storage, keys=keys, sleep=sleep),
        requests=RequestService(storage, auth, keys=keys, clock=clock, sleep=sleep),
        payments=PaymentService(storage, keys=keys, success_rate=success_rate, rng=rng, clock=clock, sleep=sleep),
        files=FileService(sleep=sleep),
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services(get_storage())
