import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    RQ_QUEUE_NAME: str = os.getenv("RQ_QUEUE_NAME", "checkout")

    # Storage: "redis" (default) or "memory" (single-process demo / tests)
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "redis").lower()
    STORAGE_PREFIX: str = os.getenv("STORAGE_PREFIX", "eduverify_")
    LOCK_TTL_MS: int = int(os.getenv("LOCK_TTL_MS", "5000"))
    # Live tokens kept per user; older ones are dropped at login
    MAX_SESSIONS_PER_USER: int = int(os.getenv("MAX_SESSIONS_PER_USER", "5"))

    # Pricing & SLA
    VERIFICATION_FEE: int = int(os.getenv("VERIFICATION_FEE", "500"))
    CURRENCY: str = os.getenv("CURRENCY", "INR")
    DEFAULT_SLA_DAYS: int = int(os.getenv("DEFAULT_SLA_DAYS", "5"))
    MAX_SLA_DAYS: int = int(os.getenv("MAX_SLA_DAYS", "30"))

    # Mock gateway
    PAYMENT_SUCCESS_RATE: float = float(os.getenv("PAYMENT_SUCCESS_RATE", "0.9"))
    # "sync": pay inline in the request; "rq": enqueue a checkout job
    CHECKOUT_MODE: str = os.getenv("CHECKOUT_MODE", "sync").lower()

    # Artificial latency per operation (ms). MOCK_LATENCY_SCALE=0 disables all of them.
    MOCK_LATENCY_SCALE: float = float(os.getenv("MOCK_LATENCY_SCALE", "1.0"))
    LATENCY_LOGIN_MS: int = int(os.getenv("LATENCY_LOGIN_MS", "500"))
    LATENCY_LIST_MS: int = int(os.getenv("LATENCY_LIST_MS", "300"))
    LATENCY_GET_MS: int = int(os.getenv("LATENCY_GET_MS", "200"))
    LATENCY_WRITE_MS: int = int(os.getenv("LATENCY_WRITE_MS", "300"))
    LATENCY_ORDER_MS: int = int(os.getenv("LATENCY_ORDER_MS", "500"))
    LATENCY_PAY_MS: int = int(os.getenv("LATENCY_PAY_MS", "1500"))
    LATENCY_UPLOAD_MS: int = int(os.getenv("LATENCY_UPLOAD_MS", "1000"))

    # Uploads
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    ALLOWED_UPLOAD_TYPES: str = os.getenv(
        "ALLOWED_UPLOAD_TYPES", "application/pdf,image/png,image/jpeg,image/jpg"
    )
    MAX_LOGO_BYTES: int = int(os.getenv("MAX_LOGO_BYTES", str(2 * 1024 * 1024)))
    ALLOWED_LOGO_TYPES: str = os.getenv("ALLOWED_LOGO_TYPES", "image/png,image/jpeg,image/jpg")
    MAX_FILES_PER_REQUEST: int = int(os.getenv("MAX_FILES_PER_REQUEST", "10"))

    # Lifecycle policy: keep the historical "any status from any status" behaviour unless enabled
    ENFORCE_STATUS_TRANSITIONS: bool = os.getenv("ENFORCE_STATUS_TRANSITIONS", "false").lower() == "true"

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"

settings = Settings()
