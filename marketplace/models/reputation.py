"""UserReputation model: the latest history-derived credibility score per user."""

from datetime import datetime

from sqlmodel import SQLModel, Field

from marketplace.models.transaction import utcnow


class UserReputation(SQLModel, table=True):
    __tablename__ = "user_reputation"

    user_id: str = Field(primary_key=True)
    credibility_score: float = Field(default=0.0, ge=0, le=100)
    last_score_update: datetime = Field(default_factory=utcnow)
