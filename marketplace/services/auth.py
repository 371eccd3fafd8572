"""Bearer token helpers. Tokens are minted by the auth service; we only need the subject."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from marketplace.config import settings


def create_access_token(subject: str, expire_minutes: int | None = None) -> str:
    minutes = settings.jwt_expire_minutes if expire_minutes is None else expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str | None:
    """Decode JWT and return the subject (user id). Returns None on failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload.get("sub")
    except JWTError:
        return None
