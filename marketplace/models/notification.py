"""Notification model: stored copy of every lifecycle alert sent to a user."""

from datetime import datetime
from typing import Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON

from marketplace.models.transaction import utcnow


class Notification(SQLModel, table=True):
    __tablename__ = "notification"

    id: int | None = Field(default=None, primary_key=True)
    recipient_id: str = Field(index=True)
    type: str  # TRANSACTION_INITIATED, TRANSACTION_COMPLETED, ...
    title: str
    message: str
    priority: str = "high"  # "high" or "critical"
    read: bool = False
    data: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)
