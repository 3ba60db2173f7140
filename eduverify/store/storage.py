import json
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from eduverify.settings import settings
from eduverify.store.redis_conn import get_redis
from eduverify.observability.logging import log

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class Storage:
    """
    Key-value persistence of JSON documents.
    get() returns None when the key is absent or holds invalid JSON.
    """

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, raw: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def lock(self, key: str):
        raise NotImplementedError

    def get(self, key: str) -> Any:
        raw = self._read(key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            log(event="storage_decode_failed", key=key)
            return None

    def set(self, key: str, value: Any) -> None:
        self._write(key, json.dumps(value, ensure_ascii=False))


class RedisStorage(Storage):
    def __init__(self, redis=None, namespace: str = "", lock_ttl_ms: int = 5000):
        self.r = redis if redis is not None else get_redis()
        self.namespace = namespace
        self.lock_ttl_ms = lock_ttl_ms

    def _read(self, key: str) -> Optional[str]:
        return self.r.get(key)

    def _write(self, key: str, raw: str) -> None:
        self.r.set(key, raw)

    def remove(self, key: str) -> None:
        self.r.delete(key)

    def clear(self) -> None:
        # Only our namespace: never FLUSHDB a shared Redis
        for k in self.r.scan_iter(match=f"{self.namespace}*"):
            self.r.delete(k)

    @contextmanager
    def lock(self, key: str):
        """
        Single-writer lock for a read-modify-write cycle on one key.
        """
        lock_key = f"lock:{key}"
        token = str(time.time())
        acquired = self.r.set(lock_key, token, px=self.lock_ttl_ms, nx=True)

        try:
            if not acquired:
                for _ in range(5):
                    time.sleep(0.1)
                    if self.r.set(lock_key, token, px=self.lock_ttl_ms, nx=True):
                        acquired = True
                        break

                if not acquired:
                    raise RuntimeError(f"Could not acquire lock for {key}")

            yield
        finally:
            if acquired:
                self.r.eval(_RELEASE_SCRIPT, 1, lock_key, token)


class MemoryStorage(Storage):
    """In-process backend; also the fake used by the test-suite."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def _write(self, key: str, raw: str) -> None:
        self.data[key] = raw

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()

    @contextmanager
    def lock(self, key: str):
        with self._guard:
            lk = self._locks.setdefault(key, threading.Lock())
        with lk:
            yield


def get_storage() -> Storage:
    if settings.STORAGE_BACKEND == "memory":
        return MemoryStorage()
    return RedisStorage(namespace=settings.STORAGE_PREFIX, lock_ttl_ms=settings.LOCK_TTL_MS)
