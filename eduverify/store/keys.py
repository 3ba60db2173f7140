from eduverify.settings import settings


class Keys:
    """Fixed key names of the persisted layout; each holds one JSON document."""

    def __init__(self, prefix: str = ""):
        p = prefix
        self.AUTH_TOKEN = f"{p}auth_token"
        self.CURRENT_USER = f"{p}current_user"
        self.COMPANIES = f"{p}companies"
        self.CANDIDATES = f"{p}candidates"
        self.REQUESTS = f"{p}requests"
        # token -> {"user": ..., "company": ...}
        self.SESSIONS = f"{p}sessions"
        # email -> sha256 hex of the signup password
        self.CREDENTIALS = f"{p}credentials"


KEYS = Keys(settings.STORAGE_PREFIX)
