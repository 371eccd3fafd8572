"""Shared constants: transaction statuses, product statuses, events, badges."""

# Transaction statuses
PENDING = "pending"
COMPLETED = "completed"
CANCELLED = "cancelled"
DISPUTED = "disputed"

TRANSACTION_STATUSES = [PENDING, COMPLETED, CANCELLED, DISPUTED]

# Product statuses as seen through the product gateway
PRODUCT_AVAILABLE = "available"
PRODUCT_PENDING = "pending"
PRODUCT_SOLD = "sold"

PRODUCT_STATUSES = [PRODUCT_AVAILABLE, PRODUCT_PENDING, PRODUCT_SOLD]

MIN_RATING = 1
MAX_RATING = 5

# Notification event names
TRANSACTION_INITIATED = "TRANSACTION_INITIATED"
TRANSACTION_COMPLETED = "TRANSACTION_COMPLETED"
TRANSACTION_CANCELLED = "TRANSACTION_CANCELLED"
TRANSACTION_DISPUTED = "TRANSACTION_DISPUTED"
CREDIBILITY_CHANGE = "CREDIBILITY_CHANGE"

# (title, message, priority) per event
ALERT_TEMPLATES: dict[str, tuple[str, str, str]] = {
    TRANSACTION_INITIATED: (
        "New Transaction Started",
        "A new transaction has been initiated for your item",
        "high",
    ),
    TRANSACTION_COMPLETED: (
        "Transaction Completed",
        "Your transaction has been completed successfully",
        "high",
    ),
    TRANSACTION_CANCELLED: (
        "Transaction Cancelled",
        "A transaction has been cancelled",
        "critical",
    ),
    TRANSACTION_DISPUTED: (
        "Transaction Disputed",
        "A dispute has been raised for your transaction",
        "critical",
    ),
    CREDIBILITY_CHANGE: (
        "Credibility Score Updated",
        "Your credibility score has been updated",
        "high",
    ),
}

# Badge tiers, highest first: (minimum score, label)
BADGE_TIERS: list[tuple[float, str]] = [
    (90, "Trusted Elite"),
    (80, "Trusted Pro"),
    (70, "Trusted"),
    (50, "Rising"),
]
DEFAULT_BADGE = "New Member"
