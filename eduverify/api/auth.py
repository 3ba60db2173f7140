from fastapi import Depends, Header

from eduverify.container import Services, get_services
from eduverify.services.errors import AuthError


def get_token(authorization: str = Header(default="")) -> str:
    """Bearer token from the Authorization header ("" when absent)."""
    scheme, _, value = (authorization or "").partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return value.strip()


def require_token(token: str = Depends(get_token), services: Services = Depends(get_services)) -> str:
    """
    Token of a live session; raises "Not authenticated" otherwise.
    Roles are not checked: any signed-in user may call any operation.
    """
    if not token:
        raise AuthError("Not authenticated")
    services.auth.me(token)
    return token
