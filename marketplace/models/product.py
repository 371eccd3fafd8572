"""Product model: the slice of a catalog listing the lifecycle needs."""

import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from marketplace.models.transaction import utcnow
from marketplace.utils.constants import PRODUCT_AVAILABLE


class Product(SQLModel, table=True):
    __tablename__ = "product"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    seller_id: str = Field(index=True)
    title: str = ""
    price: float = Field(default=0.0, ge=0)
    status: str = Field(default=PRODUCT_AVAILABLE, index=True)  # available, pending, sold
    updated_at: datetime = Field(default_factory=utcnow)
