"""Pydantic schemas for credibility responses."""

from datetime import datetime

from pydantic import BaseModel


class ScoreBreakdownRead(BaseModel):
    transaction_score: float
    rating_score: float
    response_score: float
    reliability_score: float

    model_config = {"from_attributes": True}


class UserStatsRead(BaseModel):
    total_transactions: int
    completed_transactions: int
    cancelled_transactions: int
    disputed_transactions: int
    average_rating: float
    average_response_time: float | None = None
    dispute_rate: float

    model_config = {"from_attributes": True}


class CredibilityRead(BaseModel):
    user_id: str
    score: float
    breakdown: ScoreBreakdownRead
    badge: str
    stats: UserStatsRead
    last_score_update: datetime | None = None

    model_config = {"from_attributes": True}
