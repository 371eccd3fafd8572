"""Transaction persistence with compare-and-set updates.

Transactions are never deleted: the credibility engine re-derives scores
from the full history, so every record stays queryable by participant.
"""

import logging

from sqlalchemy import or_, update
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from marketplace.models.transaction import Transaction, utcnow

logger = logging.getLogger(__name__)


class TransactionStore:
    def __init__(self, engine: Engine):
        self._engine = engine

    def add(self, transaction: Transaction) -> Transaction:
        with Session(self._engine) as session:
            session.add(transaction)
            session.commit()
            session.refresh(transaction)
            return transaction

    def get(self, transaction_id: str) -> Transaction | None:
        with Session(self._engine) as session:
            return session.get(Transaction, transaction_id)

    def list_for_user(self, user_id: str, status: str | None = None) -> list[Transaction]:
        """All transactions where the user is buyer or seller, newest first."""
        stmt = select(Transaction).where(
            or_(Transaction.seller_id == user_id, Transaction.buyer_id == user_id)
        )
        if status is not None:
            stmt = stmt.where(Transaction.status == status)
        stmt = stmt.order_by(Transaction.created_at.desc())
        with Session(self._engine) as session:
            return list(session.exec(stmt).all())

    def compare_and_set(
        self, transaction_id: str, expected_version: int, **changes
    ) -> Transaction | None:
        """Apply ``changes`` only if the stored version still matches.

        Returns the updated record, or None when another writer got there first.
        """
        changes["version"] = expected_version + 1
        changes.setdefault("updated_at", utcnow())
        stmt = (
            update(Transaction)
            .where(Transaction.id == transaction_id)
            .where(Transaction.version == expected_version)
            .values(**changes)
        )
        with Session(self._engine) as session:
            result = session.exec(stmt)
            if result.rowcount != 1:
                session.rollback()
                logger.debug(
                    f"CAS conflict on transaction {transaction_id} at version {expected_version}"
                )
                return None
            session.commit()
            return session.get(Transaction, transaction_id)
