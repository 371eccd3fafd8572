"""Process-wide lifecycle instance wired to the configured database."""

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from marketplace.config import settings
from marketplace.services.credibility import CredibilityEngine, ScoringConfig
from marketplace.services.lifecycle import TransactionLifecycle
from marketplace.services.notifications import (
    BackgroundNotificationGateway,
    DatabaseNotificationGateway,
)
from marketplace.services.product_gateway import SqlProductGateway
from marketplace.services.reputation_store import ReputationStore
from marketplace.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)

_lifecycle: Optional[TransactionLifecycle] = None


def build_lifecycle(bind: Engine, background_notifications: bool = True) -> TransactionLifecycle:
    notifier = DatabaseNotificationGateway(bind)
    if background_notifications:
        notifier = BackgroundNotificationGateway(notifier, max_workers=settings.notification_workers)

    transactions = TransactionStore(bind)
    credibility = CredibilityEngine(
        transactions,
        ReputationStore(bind),
        config=ScoringConfig.from_settings(settings),
        notifier=notifier,
    )
    return TransactionLifecycle(
        transactions=transactions,
        products=SqlProductGateway(bind),
        credibility=credibility,
        notifier=notifier,
    )


def init_lifecycle(bind: Engine | None = None) -> TransactionLifecycle:
    global _lifecycle
    if bind is None:
        from marketplace.database import engine as bind
    _lifecycle = build_lifecycle(bind)
    logger.info("Transaction lifecycle initialised")
    return _lifecycle


def get_lifecycle() -> TransactionLifecycle:
    if _lifecycle is None:
        return init_lifecycle()
    return _lifecycle


def shutdown_lifecycle():
    global _lifecycle
    if _lifecycle is None:
        return
    notifier = _lifecycle.notifier
    if isinstance(notifier, BackgroundNotificationGateway):
        notifier.shutdown(wait=True)
    _lifecycle = None
