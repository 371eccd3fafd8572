"""Pydantic schemas for the notifications API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class NotificationRead(BaseModel):
    id: int
    type: str
    title: str
    message: str
    priority: str
    read: bool
    data: dict[str, Any] | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MarkReadRequest(BaseModel):
    notification_ids: list[int] = Field(min_length=1)
