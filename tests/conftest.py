"""Shared fixtures: an isolated SQLite database and a wired lifecycle per test."""

import threading
from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session

from marketplace.database import create_db_and_tables, make_engine
from marketplace.engine.reconcile import RecomputeQueue
from marketplace.models.product import Product
from marketplace.services.credibility import CredibilityEngine, ScoringConfig
from marketplace.services.lifecycle import TransactionLifecycle
from marketplace.services.notifications import NotificationGateway
from marketplace.services.product_gateway import SqlProductGateway
from marketplace.services.reputation_store import ReputationStore
from marketplace.services.transaction_store import TransactionStore


class RecordingNotifier(NotificationGateway):
    """Collects emitted events instead of delivering them."""

    def __init__(self):
        self.events: list[tuple[str, str, dict]] = []
        self._lock = threading.Lock()

    def emit(self, user_id, event, payload):
        with self._lock:
            self.events.append((user_id, event, payload))

    def named(self, event: str) -> list[tuple[str, str, dict]]:
        return [e for e in self.events if e[1] == event]


class Clock:
    """Manually advanced UTC clock."""

    def __init__(self):
        self.now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float):
        self.now += timedelta(minutes=minutes)


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'marketplace.db'}")
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def recompute_queue():
    return RecomputeQueue()


@pytest.fixture
def transaction_store(engine):
    return TransactionStore(engine)


@pytest.fixture
def reputation_store(engine):
    return ReputationStore(engine)


@pytest.fixture
def credibility(transaction_store, reputation_store, notifier):
    return CredibilityEngine(
        transaction_store, reputation_store, config=ScoringConfig(), notifier=notifier
    )


@pytest.fixture
def lifecycle(engine, transaction_store, credibility, notifier, recompute_queue, clock):
    return TransactionLifecycle(
        transactions=transaction_store,
        products=SqlProductGateway(engine),
        credibility=credibility,
        notifier=notifier,
        recompute_queue=recompute_queue,
        min_score=50.0,
        dispute_reason_min_length=10,
        allow_self_purchase=False,
        max_retries=20,
        clock=clock,
    )


@pytest.fixture
def make_product(engine):
    def _make(seller_id: str = "seller", price: float = 25.0, status: str = "available") -> Product:
        product = Product(seller_id=seller_id, title="Desk lamp", price=price, status=status)
        with Session(engine) as session:
            session.add(product)
            session.commit()
            session.refresh(product)
        return product

    return _make


@pytest.fixture
def product_status(engine):
    def _status(product_id: str) -> str:
        with Session(engine) as session:
            return session.get(Product, product_id).status

    return _status


@pytest.fixture
def trusted_seller(reputation_store, clock):
    """Give a seller a stored score that clears the admission gate."""

    def _seed(user_id: str = "seller", score: float = 60.0) -> str:
        reputation_store.put(user_id, score, clock())
        return user_id

    return _seed


@pytest.fixture
def pending_tx(lifecycle, make_product, trusted_seller):
    """A fresh pending transaction between 'seller' and 'buyer'."""

    def _create(seller_id: str = "seller", buyer_id: str = "buyer"):
        trusted_seller(seller_id)
        product = make_product(seller_id=seller_id)
        return lifecycle.create_transaction(buyer_id, seller_id, product.id, product.price)

    return _create
