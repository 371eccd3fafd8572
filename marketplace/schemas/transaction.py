"""Pydantic schemas for the transaction API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from marketplace.config import settings

TransactionStatus = Literal["pending", "completed", "cancelled", "disputed"]


class TransactionCreate(BaseModel):
    product_id: str = Field(min_length=1)

    @field_validator("product_id")
    @classmethod
    def _trim_product_id(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("Product ID is required")
        return text


class RatingSubmit(BaseModel):
    rating: int = Field(ge=1, le=5)


class DisputeCreate(BaseModel):
    reason: str

    @field_validator("reason")
    @classmethod
    def _validate_reason(cls, value: str) -> str:
        text = value.strip()
        if len(text) < settings.dispute_reason_min_length:
            raise ValueError("Please provide a detailed reason")
        return text


class TransactionRead(BaseModel):
    id: str
    seller_id: str
    buyer_id: str
    product_id: str
    amount: float
    status: TransactionStatus
    seller_rating: int | None = None
    buyer_rating: int | None = None
    completion_time: int | None = None
    dispute_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
