import uuid
from eduverify.utils.time import now_ms


def new_id(prefix: str) -> str:
    """
    Time-ordered id such as "REQ1700000000000a1b2c3" or "candidate-1700000000000a1b2c3".
    The random suffix keeps ids distinct when two are minted in the same millisecond.
    """
    return f"{prefix}{now_ms()}{uuid.uuid4().hex[:6]}"
