"""Transaction lifecycle API."""

from fastapi import APIRouter, Depends

from marketplace.api.deps import get_current_user_id, get_lifecycle
from marketplace.schemas.transaction import (
    DisputeCreate,
    RatingSubmit,
    TransactionCreate,
    TransactionRead,
    TransactionStatus,
)
from marketplace.services.lifecycle import TransactionLifecycle

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.post("", response_model=TransactionRead, status_code=201)
def create_transaction(
    data: TransactionCreate,
    user_id: str = Depends(get_current_user_id),
    lifecycle: TransactionLifecycle = Depends(get_lifecycle),
):
    """Start buying a listing. Seller and price come from the listing itself."""
    listing = lifecycle.products.get_listing(data.product_id)
    return lifecycle.create_transaction(
        buyer_id=user_id,
        seller_id=listing.seller_id,
        product_id=listing.id,
        amount=listing.price,
    )


@router.get("", response_model=list[TransactionRead])
def list_transactions(
    status: TransactionStatus | None = None,
    user_id: str = Depends(get_current_user_id),
    lifecycle: TransactionLifecycle = Depends(get_lifecycle),
):
    return lifecycle.list_transactions(user_id, status)


@router.get("/{transaction_id}", response_model=TransactionRead)
def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    lifecycle: TransactionLifecycle = Depends(get_lifecycle),
):
    return lifecycle.get_transaction(transaction_id, user_id)


@router.post("/{transaction_id}/rating", response_model=TransactionRead)
def submit_rating(
    transaction_id: str,
    data: RatingSubmit,
    user_id: str = Depends(get_current_user_id),
    lifecycle: TransactionLifecycle = Depends(get_lifecycle),
):
    return lifecycle.submit_rating(transaction_id, user_id, data.rating)


@router.post("/{transaction_id}/cancel", response_model=TransactionRead)
def cancel_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    lifecycle: TransactionLifecycle = Depends(get_lifecycle),
):
    return lifecycle.cancel_transaction(transaction_id, user_id)


@router.post("/{transaction_id}/dispute", response_model=TransactionRead)
def raise_dispute(
    transaction_id: str,
    data: DisputeCreate,
    user_id: str = Depends(get_current_user_id),
    lifecycle: TransactionLifecycle = Depends(get_lifecycle),
):
    return lifecycle.raise_dispute(transaction_id, user_id, data.reason)
