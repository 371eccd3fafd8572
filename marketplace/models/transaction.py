"""Transaction model: append-only record of a deal between a buyer and a seller."""

import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

from marketplace.utils.constants import PENDING


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Transaction(SQLModel, table=True):
    __tablename__ = "transaction"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    seller_id: str = Field(index=True)
    buyer_id: str = Field(index=True)
    product_id: str = Field(index=True)
    amount: float = Field(ge=0)
    status: str = Field(default=PENDING, index=True)  # pending, completed, cancelled, disputed
    seller_rating: int | None = None
    buyer_rating: int | None = None
    completion_time: int | None = None  # minutes from creation to completion
    dispute_reason: str | None = None
    version: int = 0  # bumped on every mutation; compare-and-set token
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_participant(self, user_id: str) -> bool:
        return user_id == self.seller_id or user_id == self.buyer_id

    def counterparty(self, user_id: str) -> str:
        return self.buyer_id if user_id == self.seller_id else self.seller_id
