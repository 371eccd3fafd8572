"""Shared API dependencies."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from marketplace.services.auth import decode_access_token
from marketplace.services.factory import get_lifecycle as _get_lifecycle
from marketplace.services.lifecycle import TransactionLifecycle

bearer_scheme = HTTPBearer()


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    """Validate JWT and return the caller's user id."""
    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return user_id


def get_lifecycle() -> TransactionLifecycle:
    return _get_lifecycle()
