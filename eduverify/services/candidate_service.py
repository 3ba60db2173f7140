import time
from typing import List

from eduverify.settings import settings
from eduverify.store.keys import KEYS
from eduverify.store.models import Candidate, from_dict, to_dict
from eduverify.services.errors import NotFoundError, ValidationError
from eduverify.utils.ids import new_id
from eduverify.utils.time import simulate_latency
from eduverify.observability.logging import log


class CandidateService:
    def __init__(self, storage, keys=KEYS, sleep=time.sleep):
        self.storage = storage
        self.keys = keys
        self.sleep = sleep

    def list(self) -> List[Candidate]:
        simulate_latency(settings.LATENCY_LIST_MS, self.sleep)
        return [from_dict(Candidate, c) for c in (self.storage.get(self.keys.CANDIDATES) or [])]

    def get(self, candidate_id: str) -> Candidate:
        simulate_latency(settings.LATENCY_GET_MS, self.sleep)
        for c in self.storage.get(self.keys.CANDIDATES) or []:
            if c.get("id") == candidate_id:
                return from_dict(Candidate, c)
        raise NotFoundError("Candidate not found")

    def create(self, payload: dict) -> Candidate:
        """Create a candidate from every Candidate field except `id`."""
        simulate_latency(settings.LATENCY_WRITE_MS, self.sleep)

        docs = list(payload.get("documentUrls") or [])
        if len(docs) > settings.MAX_FILES_PER_REQUEST:
            raise ValidationError(f"Maximum {settings.MAX_FILES_PER_REQUEST} files allowed")

        candidate = from_dict(Candidate, {**payload, "documentUrls": docs})
        candidate.id = new_id("candidate-")

        with self.storage.lock(self.keys.CANDIDATES):
            candidates = self.storage.get(self.keys.CANDIDATES) or []
            candidates.append(to_dict(candidate))
            self.storage.set(self.keys.CANDIDATES, candidates)

        log(event="candidate_created", candidateId=candidate.id, documents=len(docs))
        return candidate
