import time
from dataclasses import dataclass
from typing import Iterable, Optional

from eduverify.settings import settings
from eduverify.utils.time import now_ms, simulate_latency
from eduverify.observability.logging import log


@dataclass
class FileInfo:
    name: str
    size: int
    type: str


def _csv(value: str) -> list:
    return [x.strip() for x in (value or "").split(",") if x.strip()]


class FileService:
    """Client-side checks plus a fake upload: bytes are never stored."""

    def __init__(self, sleep=time.sleep):
        self.sleep = sleep

    def validate_file(
        self,
        file: FileInfo,
        max_size: Optional[int] = None,
        allowed_types: Optional[Iterable[str]] = None,
    ) -> Optional[str]:
        """Human-readable error, or None when the file is acceptable."""
        max_size = max_size or settings.MAX_UPLOAD_BYTES
        allowed = list(allowed_types) if allowed_types else _csv(settings.ALLOWED_UPLOAD_TYPES)

        if file.size > max_size:
            return f"File size must be less than {max_size / 1024 / 1024:g}MB"

        if file.type not in allowed:
            return f"File type must be one of: {', '.join(allowed)}"

        return None

    def validate_logo(self, file: FileInfo) -> Optional[str]:
        return self.validate_file(
            file, max_size=settings.MAX_LOGO_BYTES, allowed_types=_csv(settings.ALLOWED_LOGO_TYPES)
        )

    def upload(self, file: FileInfo) -> dict:
        simulate_latency(settings.LATENCY_UPLOAD_MS, self.sleep)
        out = {
            "url": f"mock-url-{now_ms()}-{file.name}",
            "name": file.name,
            "size": file.size,
            "type": file.type,
        }
        log(event="file_uploaded", name=file.name, size=file.size, type=file.type)
        return out
