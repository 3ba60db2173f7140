import hashlib
import time
from typing import Optional

from eduverify.settings import settings
from eduverify.store.keys import KEYS
from eduverify.store.models import (
    AuthSession,
    Company,
    CompanyPatch,
    CompanySignup,
    User,
    apply_patch,
    from_dict,
    session_from_dict,
    to_dict,
)
from eduverify.services.errors import AuthError, ConflictError, ValidationError
from eduverify.utils.ids import new_id
from eduverify.utils.time import simulate_latency
from eduverify.observability.logging import log

DEMO_PASSWORD = "demo123"

DEMO_COMPANY = Company(
    id="company-1",
    companyName="Demo Tech Solutions",
    email="employer@demo",
    website="https://demo.com",
    contactNumber="+919876543210",
    address="123 Demo Street, Mumbai, Maharashtra, 400001",
    slaDays=5,
)

DEMO_ACCOUNTS = {
    "employer@demo": User(
        id="user-1", companyId="company-1", name="Demo Employer", email="employer@demo", role="EMPLOYER"
    ),
    "verifier@demo": User(
        id="user-2", companyId="company-1", name="Demo Verifier", email="verifier@demo", role="VERIFIER"
    ),
}


def _hash_password(password: str) -> str:
    return hashlib.sha256((password or "").encode("utf-8")).hexdigest()


class AuthService:
    def __init__(self, storage, keys=KEYS, sleep=time.sleep):
        self.storage = storage
        self.keys = keys
        self.sleep = sleep

    # -- helpers -----------------------------------------------------------

    def _companies(self) -> list:
        return self.storage.get(self.keys.COMPANIES) or []

    def _start_session(self, user: User, company: Company) -> str:
        token = new_id("mock-jwt-")
        doc = {"user": to_dict(user), "company": to_dict(company)}
        with self.storage.lock(self.keys.SESSIONS):
            sessions = self.storage.get(self.keys.SESSIONS) or {}
            sessions[token] = doc
            self._prune_sessions(sessions, user.email)
            self.storage.set(self.keys.SESSIONS, sessions)
        self.storage.set(self.keys.AUTH_TOKEN, token)
        self.storage.set(self.keys.CURRENT_USER, doc)
        return token

    @staticmethod
    def _prune_sessions(sessions: dict, email: str) -> None:
        # Oldest first: dicts keep insertion order through the JSON round trip
        mine = [t for t, s in sessions.items() if (s.get("user") or {}).get("email") == email]
        excess = len(mine) - max(1, settings.MAX_SESSIONS_PER_USER)
        for stale in mine[:max(0, excess)]:
            sessions.pop(stale, None)

    def _demo_company(self) -> Company:
        # Settings saved for the demo company take precedence over the built-in record
        for c in self._companies():
            if c.get("id") == DEMO_COMPANY.id:
                return from_dict(Company, c)
        return from_dict(Company, to_dict(DEMO_COMPANY))

    # -- operations ----------------------------------------------------------

    def login(self, email: str, password: str) -> dict:
        simulate_latency(settings.LATENCY_LOGIN_MS, self.sleep)

        demo_user = DEMO_ACCOUNTS.get(email)
        if demo_user is not None and password == DEMO_PASSWORD:
            user = from_dict(User, to_dict(demo_user))
            token = self._start_session(user, self._demo_company())
            log(event="auth_login_ok", userId=user.id, role=user.role, demo=True)
            return {"token": token, "role": user.role, "userId": user.id}

        credentials = self.storage.get(self.keys.CREDENTIALS) or {}
        stored_hash = credentials.get(email)
        company = next((c for c in self._companies() if c.get("email") == email), None)

        if company and stored_hash and stored_hash == _hash_password(password):
            company = from_dict(Company, company)
            user = User(
                id=new_id("user-"),
                companyId=company.id,
                name=company.companyName,
                email=company.email,
                role="EMPLOYER",
            )
            token = self._start_session(user, company)
            log(event="auth_login_ok", userId=user.id, role=user.role, demo=False)
            return {"token": token, "role": user.role, "userId": user.id}

        log(event="auth_login_failed", email=email)
        raise AuthError("Invalid email or password")

    def signup(self, data: CompanySignup) -> Company:
        simulate_latency(settings.LATENCY_LOGIN_MS, self.sleep)

        with self.storage.lock(self.keys.COMPANIES):
            companies = self._companies()
            if any(c.get("email") == data.email for c in companies):
                raise ConflictError("Email already registered")

            company = Company(
                id=new_id("company-"),
                companyName=data.companyName,
                email=data.email,
                website=data.website or None,
                companyCertificateUrl=(
                    f"mock-url-{data.companyCertificateName}" if data.companyCertificateName else None
                ),
                contactNumber=data.contactNumber,
                address=data.address,
                slaDays=settings.DEFAULT_SLA_DAYS,
            )
            companies.append(to_dict(company))
            self.storage.set(self.keys.COMPANIES, companies)

        with self.storage.lock(self.keys.CREDENTIALS):
            credentials = self.storage.get(self.keys.CREDENTIALS) or {}
            credentials[data.email] = _hash_password(data.password)
            self.storage.set(self.keys.CREDENTIALS, credentials)

        log(event="auth_signup", companyId=company.id, email=company.email)
        return company

    def me(self, token: Optional[str] = None) -> AuthSession:
        """
        Session behind `token`; without a token, the current (last logged-in) session.
        """
        if token:
            doc = (self.storage.get(self.keys.SESSIONS) or {}).get(token)
        else:
            doc = self.storage.get(self.keys.CURRENT_USER)
        if not doc:
            raise AuthError("Not authenticated")
        return session_from_dict(doc)

    def logout(self, token: Optional[str] = None) -> None:
        current = self.storage.get(self.keys.AUTH_TOKEN)
        target = token or current
        if target:
            with self.storage.lock(self.keys.SESSIONS):
                sessions = self.storage.get(self.keys.SESSIONS) or {}
                if sessions.pop(target, None) is not None:
                    self.storage.set(self.keys.SESSIONS, sessions)
        if token is None or token == current:
            self.storage.remove(self.keys.AUTH_TOKEN)
            self.storage.remove(self.keys.CURRENT_USER)

    def is_authenticated(self) -> bool:
        return bool(self.storage.get(self.keys.AUTH_TOKEN))

    def get_token(self) -> Optional[str]:
        return self.storage.get(self.keys.AUTH_TOKEN)

    def update_company(self, token: Optional[str], patch: CompanyPatch) -> Company:
        """
        Persist company settings for the caller's company and refresh every live
        session of that company. Requests already created keep their dueAt.
        """
        simulate_latency(settings.LATENCY_WRITE_MS, self.sleep)
        session = self.me(token)

        if patch.slaDays is not None and not (1 <= int(patch.slaDays) <= settings.MAX_SLA_DAYS):
            raise ValidationError(f"SLA days must be between 1 and {settings.MAX_SLA_DAYS}")

        with self.storage.lock(self.keys.COMPANIES):
            companies = self._companies()
            if patch.email and any(
                c.get("email") == patch.email and c.get("id") != session.company.id for c in companies
            ):
                raise ConflictError("Email already registered")

            index = next((i for i, c in enumerate(companies) if c.get("id") == session.company.id), -1)
            company = from_dict(Company, companies[index]) if index >= 0 else session.company
            old_email = company.email
            apply_patch(company, patch)
            if index >= 0:
                companies[index] = to_dict(company)
            else:
                companies.append(to_dict(company))
            self.storage.set(self.keys.COMPANIES, companies)

        if company.email != old_email:
            # The password hash follows the login email
            with self.storage.lock(self.keys.CREDENTIALS):
                credentials = self.storage.get(self.keys.CREDENTIALS) or {}
                if old_email in credentials:
                    credentials[company.email] = credentials.pop(old_email)
                    self.storage.set(self.keys.CREDENTIALS, credentials)

        self._refresh_sessions(company)
        log(event="company_updated", companyId=company.id, slaDays=company.slaDays)
        return company

    def _refresh_sessions(self, company: Company) -> None:
        doc = to_dict(company)
        with self.storage.lock(self.keys.SESSIONS):
            sessions = self.storage.get(self.keys.SESSIONS) or {}
            for s in sessions.values():
                if (s.get("company") or {}).get("id") == company.id:
                    s["company"] = doc
            self.storage.set(self.keys.SESSIONS, sessions)

        current = self.storage.get(self.keys.CURRENT_USER)
        if current and (current.get("company") or {}).get("id") == company.id:
            current["company"] = doc
            self.storage.set(self.keys.CURRENT_USER, current)
