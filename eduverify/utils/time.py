import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from eduverify.settings import settings

Clock = Callable[[], datetime]


def now_ms() -> int:
    return int(time.time() * 1000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """
    ISO-8601 in UTC with millisecond precision and a 'Z' suffix,
    e.g. 2024-01-01T00:00:00.000Z. Naive datetimes are taken as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_iso(ts: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (trailing 'Z' supported) into an aware UTC datetime.
    Returns None for empty or unparseable input.
    """
    if not ts or not isinstance(ts, str):
        return None
    s = ts.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def add_days(dt: datetime, days: int) -> datetime:
    return dt + timedelta(days=int(days))


def simulate_latency(ms: int, sleep: Callable[[float], None] = time.sleep) -> None:
    """Sleep for an artificial backend delay, scaled by MOCK_LATENCY_SCALE."""
    scale = float(getattr(settings, "MOCK_LATENCY_SCALE", 1.0) or 0.0)
    delay = max(0.0, (ms / 1000.0) * scale)
    if delay > 0:
        sleep(delay)
