"""Credibility score API."""

from fastapi import APIRouter, Depends

from marketplace.api.deps import get_current_user_id, get_lifecycle
from marketplace.schemas.credibility import CredibilityRead
from marketplace.services.lifecycle import TransactionLifecycle

router = APIRouter(
    prefix="/api/credibility", tags=["credibility"], dependencies=[Depends(get_current_user_id)]
)


@router.get("/{user_id}", response_model=CredibilityRead)
def get_credibility(user_id: str, lifecycle: TransactionLifecycle = Depends(get_lifecycle)):
    """Score, breakdown and badge derived from the user's full history."""
    return CredibilityRead.model_validate(lifecycle.get_credibility(user_id))
