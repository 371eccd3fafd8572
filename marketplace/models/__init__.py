"""Database models."""

from marketplace.models.transaction import Transaction
from marketplace.models.reputation import UserReputation
from marketplace.models.product import Product
from marketplace.models.notification import Notification

__all__ = [
    "Transaction",
    "UserReputation",
    "Product",
    "Notification",
]
