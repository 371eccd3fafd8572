"""Transaction lifecycle: create, rate, cancel, dispute.

State machine over ``Transaction.status``::

    (none) --create--> pending --both ratings--> completed
                       pending --cancel--------> cancelled
                       any     --dispute-------> disputed

Every status change is a compare-and-set on the transaction's version, so
two participants rating at the same moment cannot lose a rating or fire the
completion twice. Side effects run after the commit: product status flips,
score recomputes, and notifications. None of them can undo a committed
transition; failures are logged (and recomputes parked for reconciliation).
"""

import logging
from datetime import datetime
from typing import Callable

from marketplace.config import settings
from marketplace.engine.reconcile import RecomputeQueue, pending_recomputes
from marketplace.errors import (
    BelowReputationThreshold,
    ConcurrentUpdateError,
    InvalidAmount,
    InvalidDispute,
    InvalidRating,
    InvalidState,
    NotFound,
    ProductUnavailable,
    Unauthorized,
)
from marketplace.models.transaction import Transaction, as_utc, utcnow
from marketplace.services.admission import meets_score_requirement
from marketplace.services.credibility import CredibilityEngine, CredibilityReport
from marketplace.services.notifications import NotificationGateway
from marketplace.services.product_gateway import ProductStatusGateway
from marketplace.services.transaction_store import TransactionStore
from marketplace.utils.constants import (
    CANCELLED,
    COMPLETED,
    DISPUTED,
    MAX_RATING,
    MIN_RATING,
    PENDING,
    PRODUCT_AVAILABLE,
    PRODUCT_PENDING,
    PRODUCT_SOLD,
    TRANSACTION_CANCELLED,
    TRANSACTION_COMPLETED,
    TRANSACTION_DISPUTED,
    TRANSACTION_INITIATED,
    TRANSACTION_STATUSES,
)

logger = logging.getLogger(__name__)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes elapsed, rounded down."""
    elapsed = (as_utc(end) - as_utc(start)).total_seconds()
    return max(int(elapsed // 60), 0)


class TransactionLifecycle:
    def __init__(
        self,
        transactions: TransactionStore,
        products: ProductStatusGateway,
        credibility: CredibilityEngine,
        notifier: NotificationGateway,
        recompute_queue: RecomputeQueue = pending_recomputes,
        min_score: float | None = None,
        dispute_reason_min_length: int | None = None,
        allow_self_purchase: bool | None = None,
        max_retries: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.transactions = transactions
        self.products = products
        self.credibility = credibility
        self.notifier = notifier
        self.recompute_queue = recompute_queue
        self.min_score = settings.min_credibility_score if min_score is None else min_score
        self.dispute_reason_min_length = (
            settings.dispute_reason_min_length
            if dispute_reason_min_length is None
            else dispute_reason_min_length
        )
        self.allow_self_purchase = (
            settings.allow_self_purchase if allow_self_purchase is None else allow_self_purchase
        )
        self.max_retries = settings.rating_max_retries if max_retries is None else max_retries
        self.clock = clock

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_transaction(
        self, buyer_id: str, seller_id: str, product_id: str, amount: float
    ) -> Transaction:
        if amount < 0:
            raise InvalidAmount("Amount must not be negative")

        listing = self.products.get_listing(product_id)
        if listing.seller_id != seller_id:
            raise NotFound(f"Seller {seller_id} not found for product {product_id}")
        if buyer_id == seller_id and not self.allow_self_purchase:
            raise Unauthorized("You cannot buy your own listing")

        if self.products.get_status(product_id) != PRODUCT_AVAILABLE:
            raise ProductUnavailable("Product is not available")

        seller_score = self.credibility.stored_score(seller_id)
        if not meets_score_requirement(seller_score, self.min_score):
            logger.info(
                f"Rejected purchase of {product_id}: seller {seller_id} "
                f"score {seller_score} < {self.min_score}"
            )
            raise BelowReputationThreshold(
                "Seller does not meet minimum credibility requirements",
                score=seller_score,
                minimum=self.min_score,
            )

        # Only one create can move the listing out of available
        if not self.products.claim(product_id, PRODUCT_AVAILABLE, PRODUCT_PENDING):
            raise ProductUnavailable("Product is not available")

        now = self.clock()
        try:
            tx = self.transactions.add(
                Transaction(
                    seller_id=seller_id,
                    buyer_id=buyer_id,
                    product_id=product_id,
                    amount=amount,
                    status=PENDING,
                    created_at=now,
                    updated_at=now,
                )
            )
        except Exception:
            self._set_product_status(product_id, PRODUCT_AVAILABLE)
            raise
        logger.info(f"Transaction {tx.id} created: {buyer_id} buys {product_id} from {seller_id}")

        self._notify(seller_id, TRANSACTION_INITIATED, {
            "transaction_id": tx.id,
            "product_id": product_id,
            "buyer_id": buyer_id,
            "amount": amount,
        })
        return tx

    def submit_rating(self, transaction_id: str, caller_id: str, rating: int) -> Transaction:
        """Record the caller's rating; the second rating completes the deal."""
        if isinstance(rating, bool) or not isinstance(rating, int) or not (
            MIN_RATING <= rating <= MAX_RATING
        ):
            raise InvalidRating(f"Rating must be an integer from {MIN_RATING} to {MAX_RATING}")

        for _ in range(self.max_retries):
            tx = self._get_for_participant(transaction_id, caller_id)
            if tx.status != PENDING:
                raise InvalidState(f"Cannot rate a {tx.status} transaction")

            seller_rating, buyer_rating = tx.seller_rating, tx.buyer_rating
            # A self-purchase fills the seller slot first, then the buyer slot
            if caller_id == tx.seller_id and (caller_id != tx.buyer_id or seller_rating is None):
                changes = {"seller_rating": rating}
                seller_rating = rating
            else:
                changes = {"buyer_rating": rating}
                buyer_rating = rating

            now = self.clock()
            changes["updated_at"] = now
            completing = seller_rating is not None and buyer_rating is not None
            if completing:
                changes["status"] = COMPLETED
                changes["completion_time"] = minutes_between(tx.created_at, now)

            updated = self.transactions.compare_and_set(tx.id, tx.version, **changes)
            if updated is None:
                continue

            if completing:
                self._on_completed(updated)
            else:
                logger.info(f"Transaction {tx.id}: rating {rating} from {caller_id}")
            return updated

        raise ConcurrentUpdateError("Transaction was modified concurrently, please retry")

    def cancel_transaction(self, transaction_id: str, caller_id: str) -> Transaction:
        for _ in range(self.max_retries):
            tx = self._get_for_participant(transaction_id, caller_id)
            if tx.status != PENDING:
                raise InvalidState(f"Cannot cancel a {tx.status} transaction")

            updated = self.transactions.compare_and_set(
                tx.id, tx.version, status=CANCELLED, updated_at=self.clock()
            )
            if updated is None:
                continue

            logger.info(f"Transaction {tx.id} cancelled by {caller_id}")
            self._set_product_status(updated.product_id, PRODUCT_AVAILABLE)
            self._recompute_participants(updated)
            self._notify(updated.counterparty(caller_id), TRANSACTION_CANCELLED, {
                "transaction_id": updated.id,
                "cancelled_by": caller_id,
            })
            return updated

        raise ConcurrentUpdateError("Transaction was modified concurrently, please retry")

    def raise_dispute(self, transaction_id: str, caller_id: str, reason: str) -> Transaction:
        """Flag a transaction as disputed from any status. Scores are left alone."""
        reason = (reason or "").strip()
        if len(reason) < self.dispute_reason_min_length:
            raise InvalidDispute(
                f"Please provide a detailed reason (at least "
                f"{self.dispute_reason_min_length} characters)"
            )

        for _ in range(self.max_retries):
            tx = self._get_for_participant(transaction_id, caller_id)
            if tx.status == DISPUTED:
                raise InvalidState("Transaction is already disputed")

            updated = self.transactions.compare_and_set(
                tx.id, tx.version, status=DISPUTED, dispute_reason=reason,
                updated_at=self.clock(),
            )
            if updated is None:
                continue

            logger.info(f"Transaction {tx.id} disputed by {caller_id} (was {tx.status})")
            payload = {"transaction_id": updated.id, "reason": reason, "raised_by": caller_id}
            self._notify(updated.seller_id, TRANSACTION_DISPUTED, payload)
            if updated.buyer_id != updated.seller_id:
                self._notify(updated.buyer_id, TRANSACTION_DISPUTED, payload)
            return updated

        raise ConcurrentUpdateError("Transaction was modified concurrently, please retry")

    def list_transactions(self, user_id: str, status: str | None = None) -> list[Transaction]:
        if status is not None and status not in TRANSACTION_STATUSES:
            raise ValueError(f"Unknown transaction status: {status}")
        return self.transactions.list_for_user(user_id, status)

    def get_transaction(self, transaction_id: str, caller_id: str) -> Transaction:
        return self._get_for_participant(transaction_id, caller_id)

    def get_credibility(self, user_id: str) -> CredibilityReport:
        return self.credibility.report(user_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_for_participant(self, transaction_id: str, caller_id: str) -> Transaction:
        tx = self.transactions.get(transaction_id)
        if tx is None:
            raise NotFound(f"Transaction {transaction_id} not found")
        if not tx.is_participant(caller_id):
            raise Unauthorized("Not a participant in this transaction")
        return tx

    def _on_completed(self, tx: Transaction):
        logger.info(f"Transaction {tx.id} completed in {tx.completion_time} min")
        self._set_product_status(tx.product_id, PRODUCT_SOLD)
        self._recompute_participants(tx)
        payload = {"transaction_id": tx.id}
        self._notify(tx.seller_id, TRANSACTION_COMPLETED, payload)
        if tx.buyer_id != tx.seller_id:
            self._notify(tx.buyer_id, TRANSACTION_COMPLETED, payload)

    def _set_product_status(self, product_id: str, status: str):
        try:
            self.products.set_status(product_id, status)
        except Exception as e:
            logger.error(f"Could not set product {product_id} to {status}: {e}")

    def _recompute_participants(self, tx: Transaction):
        for user_id in dict.fromkeys((tx.seller_id, tx.buyer_id)):
            try:
                self.credibility.recompute(user_id)
            except Exception as e:
                logger.error(
                    f"Recompute for {user_id} after {tx.id} failed, queued for retry: {e}",
                    exc_info=True,
                )
                self.recompute_queue.add(user_id)

    def _notify(self, user_id: str, event: str, payload: dict):
        try:
            self.notifier.emit(user_id, event, payload)
        except Exception as e:
            logger.warning(f"Notification {event} to {user_id} failed: {e}")
