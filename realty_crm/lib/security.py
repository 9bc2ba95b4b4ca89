from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from realty_crm.lib.config import settings


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate an access token issued by the hosted auth service."""
    try:
        payload = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
        )
    except JWTError:
        return None

    if not payload.get("sub"):
        return None
    return payload


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Mint a token shaped like the hosted auth service's.

    Used by local tooling and tests; production tokens come from the provider.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode = {
        "sub": str(user_id),
        "aud": settings.auth_jwt_audience,
        "exp": expire,
        "role": "authenticated",
    }
    if email:
        to_encode["email"] = email
    return jwt.encode(
        to_encode,
        settings.auth_jwt_secret,
        algorithm=settings.auth_jwt_algorithm
    )
