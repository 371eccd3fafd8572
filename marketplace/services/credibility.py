"""Credibility scoring engine.

Scores are always re-derived from a user's full transaction history, never
patched with deltas, so recomputing is idempotent and concurrent recomputes
for the same user converge on the same value.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from marketplace.config import Settings, settings
from marketplace.models.transaction import Transaction, utcnow
from marketplace.services.notifications import NotificationGateway
from marketplace.services.reputation_store import ReputationStore
from marketplace.services.transaction_store import TransactionStore
from marketplace.utils.constants import (
    BADGE_TIERS,
    CANCELLED,
    COMPLETED,
    CREDIBILITY_CHANGE,
    DEFAULT_BADGE,
    DISPUTED,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoringConfig:
    """Weights and constants for the score formula."""
    ideal_response_minutes: float = 1440.0
    transaction_weight: float = 30.0
    rating_weight: float = 30.0
    response_weight: float = 20.0
    reliability_weight: float = 20.0
    dispute_penalty: float = 100.0
    cancellation_penalty: float = 50.0

    @classmethod
    def from_settings(cls, source: Settings = settings) -> "ScoringConfig":
        return cls(
            ideal_response_minutes=source.ideal_response_minutes,
            transaction_weight=source.transaction_weight,
            rating_weight=source.rating_weight,
            response_weight=source.response_weight,
            reliability_weight=source.reliability_weight,
            dispute_penalty=source.dispute_penalty,
            cancellation_penalty=source.cancellation_penalty,
        )


@dataclass
class UserStats:
    total_transactions: int = 0
    completed_transactions: int = 0
    cancelled_transactions: int = 0
    disputed_transactions: int = 0
    average_rating: float = 0.0
    average_response_time: float | None = None  # minutes; None until a timed completion exists
    dispute_rate: float = 0.0


@dataclass
class ScoreBreakdown:
    transaction_score: float
    rating_score: float
    response_score: float
    reliability_score: float


@dataclass
class CredibilityScore:
    score: float
    breakdown: ScoreBreakdown


@dataclass
class CredibilityReport:
    user_id: str
    score: float
    breakdown: ScoreBreakdown
    badge: str
    stats: UserStats
    last_score_update: datetime | None = None
    stored_score: float | None = None


# ---------------------------------------------------------------------------
# Pure computation
# ---------------------------------------------------------------------------

def round1(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def compute_stats(user_id: str, transactions: Iterable[Transaction]) -> UserStats:
    """Aggregate a user's history across both roles."""
    total = completed = cancelled = disputed = 0
    rating_sum = rating_count = 0
    time_sum = time_count = 0

    for tx in transactions:
        total += 1
        if tx.status == COMPLETED:
            completed += 1
            if tx.completion_time is not None:
                time_sum += tx.completion_time
                time_count += 1
            # The rating recorded in the user's own role on this deal
            if tx.seller_id == user_id and tx.seller_rating is not None:
                rating_sum += tx.seller_rating
                rating_count += 1
            elif tx.buyer_id == user_id and tx.buyer_rating is not None:
                rating_sum += tx.buyer_rating
                rating_count += 1
        elif tx.status == CANCELLED:
            cancelled += 1
        elif tx.status == DISPUTED:
            disputed += 1

    return UserStats(
        total_transactions=total,
        completed_transactions=completed,
        cancelled_transactions=cancelled,
        disputed_transactions=disputed,
        average_rating=rating_sum / rating_count if rating_count else 0.0,
        average_response_time=time_sum / time_count if time_count else None,
        dispute_rate=disputed / total if total else 0.0,
    )


def compute_score(stats: UserStats, config: ScoringConfig | None = None) -> CredibilityScore:
    """Deterministic score in [0, 100], rounded to one decimal."""
    config = config or ScoringConfig()
    total = max(stats.total_transactions, 1)

    transaction_score = min(
        (stats.completed_transactions * 10 / total) * (config.transaction_weight / 10),
        config.transaction_weight,
    )
    rating_score = (stats.average_rating / 5) * config.rating_weight

    # No timed completions yet (or an average of zero) counts as the ideal time
    response_time = stats.average_response_time or config.ideal_response_minutes
    response_score = min(
        (config.ideal_response_minutes / response_time) * config.response_weight,
        config.response_weight,
    )

    penalty = (
        stats.dispute_rate * config.dispute_penalty
        + (stats.cancelled_transactions / total) * config.cancellation_penalty
    )
    reliability_score = max(config.reliability_weight - penalty, 0.0)

    total_score = min(
        transaction_score + rating_score + response_score + reliability_score, 100.0
    )
    return CredibilityScore(
        score=round1(max(total_score, 0.0)),
        breakdown=ScoreBreakdown(
            transaction_score=round1(transaction_score),
            rating_score=round1(rating_score),
            response_score=round1(response_score),
            reliability_score=round1(reliability_score),
        ),
    )


def badge_for(score: float) -> str:
    for minimum, label in BADGE_TIERS:
        if score >= minimum:
            return label
    return DEFAULT_BADGE


# ---------------------------------------------------------------------------
# Engine (history in, stored score out)
# ---------------------------------------------------------------------------

class CredibilityEngine:
    def __init__(
        self,
        transactions: TransactionStore,
        reputations: ReputationStore,
        config: ScoringConfig | None = None,
        notifier: NotificationGateway | None = None,
    ):
        self.transactions = transactions
        self.reputations = reputations
        self.config = config or ScoringConfig.from_settings()
        self.notifier = notifier

    def compute_stats(self, user_id: str) -> UserStats:
        return compute_stats(user_id, self.transactions.list_for_user(user_id))

    def compute_score(self, stats: UserStats) -> CredibilityScore:
        return compute_score(stats, self.config)

    def recompute(self, user_id: str) -> CredibilityScore:
        """Re-derive the user's score from committed history and store it."""
        previous = self.reputations.get(user_id)
        result = self.compute_score(self.compute_stats(user_id))
        self.reputations.put(user_id, result.score, utcnow())
        logger.info(f"Credibility for {user_id}: {result.score}")

        if previous is not None and previous.credibility_score != result.score:
            self._notify_change(user_id, previous.credibility_score, result.score)
        return result

    def stored_score(self, user_id: str) -> float:
        """The persisted score; users without one are scored from history first."""
        record = self.reputations.get(user_id)
        if record is None:
            return self.recompute(user_id).score
        return record.credibility_score

    def report(self, user_id: str) -> CredibilityReport:
        stats = self.compute_stats(user_id)
        result = self.compute_score(stats)
        record = self.reputations.get(user_id)
        return CredibilityReport(
            user_id=user_id,
            score=result.score,
            breakdown=result.breakdown,
            badge=badge_for(result.score),
            stats=stats,
            last_score_update=record.last_score_update if record else None,
            stored_score=record.credibility_score if record else None,
        )

    def _notify_change(self, user_id: str, old: float, new: float):
        if self.notifier is None:
            return
        try:
            self.notifier.emit(
                user_id,
                CREDIBILITY_CHANGE,
                {"old_score": old, "new_score": new, "badge": badge_for(new)},
            )
        except Exception as e:
            logger.warning(f"Credibility change notification for {user_id} failed: {e}")
